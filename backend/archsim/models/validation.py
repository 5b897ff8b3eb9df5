from pydantic import BaseModel
from typing import Literal, Optional

ScaleTier = Literal["prototype", "startup", "growth", "scale", "enterprise"]
CheckOutcome = Literal["pass", "advisory", "fail"]
Severity = Literal["critical", "warning", "info"]
Grade = Literal["A", "B", "C", "D", "F"]


class ContextThresholds(BaseModel):
    max_acceptable_p99_ms: float
    min_acceptable_availability: float
    replicas_required_for_ha: int
    requires_load_balancer: bool
    requires_cache: bool
    requires_observability: bool
    requires_guardrails: bool


class ScaleTierSignals(BaseModel):
    traffic_tier: ScaleTier
    complexity_tier: ScaleTier
    component_tier: ScaleTier
    scenario_tier: Optional[ScaleTier] = None
    resolved_tier: ScaleTier


class ValidationContext(BaseModel):
    current_rps: float
    traffic_pattern: str
    scale_tier: ScaleTier
    scale_tier_label: str
    scale_tier_signals: ScaleTierSignals
    mode: Literal["scenario", "freeform"]
    scenario_name: Optional[str] = None
    component_count: int
    has_ai_components: bool
    is_monolith: bool
    thresholds: ContextThresholds


class ContextualVerdict(BaseModel):
    badge: str
    badge_color: str
    headline: str
    detail: str
    is_positive: bool


class ValidationCheck(BaseModel):
    id: str
    name: str
    outcome: CheckOutcome
    severity: Severity
    score_impact: float
    context_note: str
    explanation: str
    fix: Optional[str] = None
    advisory_note: Optional[str] = None
    scale_tier_trigger: Optional[ScaleTier] = None


class ValidationDimension(BaseModel):
    id: str
    name: str
    score: int
    checks: list[ValidationCheck] = []


class ValidationReport(BaseModel):
    overall_score: int
    grade: Grade
    verdict: ContextualVerdict
    context: ValidationContext
    dimensions: list[ValidationDimension] = []
    top_issues: list[ValidationCheck] = []
    strengths: list[str] = []


class AdvisorMessage(BaseModel):
    id: str
    type: Literal["critical", "warning", "optimization", "learning"]
    title: str
    body: str
    action_label: Optional[str] = None
    action_kind: Optional[str] = None
