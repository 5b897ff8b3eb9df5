"""Architecture validator: grades a graph across six dimensions relative to its resolved scale tier."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from archsim.checks import (
    ai_practices,
    data_integrity,
    observability,
    performance,
    reliability,
    security,
)
from archsim.engine.catalog import is_ai_kind
from archsim.engine.check_registry import CheckContext, CheckRegistry
from archsim.engine.metrics import round_half_up
from archsim.engine.scale_tier import compute_verdict, resolve_validation_context
from archsim.models.graph import SystemEdge, SystemNode
from archsim.models.metrics import MetricSnapshot
from archsim.models.scenario import ScenarioDefinition
from archsim.models.validation import ValidationCheck, ValidationDimension, ValidationReport

logger = logging.getLogger(__name__)

DIMENSION_NAMES: dict[str, str] = {
    "reliability": "Reliability & Availability",
    "performance": "Performance & Scalability",
    "dataIntegrity": "Data Integrity & Consistency",
    "security": "Security & Compliance",
    "observability": "Observability",
    "ai": "AI Best Practices",
}

DIMENSION_WEIGHTS: dict[str, int] = {
    "reliability": 25,
    "performance": 20,
    "dataIntegrity": 15,
    "security": 15,
    "observability": 10,
    "ai": 15,
}

ADVISORY_CREDIT = 0.7
SEVERITY_RANK = {"critical": 3, "warning": 2, "info": 1}
MAX_TOP_ISSUES = 3
MAX_STRENGTHS = 4

_registry = CheckRegistry()
for _module in (reliability, performance, data_integrity, security, observability, ai_practices):
    _registry.register_from_module(_module)


def get_registry() -> CheckRegistry:
    return _registry


def dimension_score(checks: Sequence[ValidationCheck]) -> int:
    """Weighted completion: passes count fully, advisories at 70%, failures not at all."""
    total = sum(c.score_impact for c in checks)
    if not checks or total == 0:
        return 100
    earned = sum(c.score_impact for c in checks if c.outcome == "pass")
    advisory = sum(c.score_impact * ADVISORY_CREDIT for c in checks if c.outcome == "advisory")
    return round_half_up((earned + advisory) / total * 100)


def letter_grade(score: float) -> str:
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    if score >= 60:
        return "D"
    return "F"


def validate(
    nodes: Sequence[SystemNode],
    edges: Sequence[SystemEdge],
    spof_ids: Sequence[str],
    metrics: MetricSnapshot,
    traffic_load: float,
    traffic_pattern: str,
    scenario: Optional[ScenarioDefinition] = None,
    registry: Optional[CheckRegistry] = None,
) -> ValidationReport:
    """Produce a full ValidationReport; never raises for structurally valid graphs."""
    registry = registry or _registry
    ctx = resolve_validation_context(nodes, edges, metrics, traffic_load, traffic_pattern, scenario)
    check_ctx = CheckContext(nodes=nodes, edges=edges, spof_ids=spof_ids, metrics=metrics, ctx=ctx)

    has_ai = any(is_ai_kind(n.component_kind) for n in nodes)
    dimension_ids = [d for d in DIMENSION_WEIGHTS if d != "ai" or has_ai]

    dimensions: list[ValidationDimension] = []
    for dim_id in dimension_ids:
        # an empty graph has nothing to grade
        checks = registry.run(dim_id, check_ctx) if nodes else []
        dimensions.append(
            ValidationDimension(
                id=dim_id,
                name=DIMENSION_NAMES[dim_id],
                score=dimension_score(checks),
                checks=checks,
            )
        )

    total_weight = sum(DIMENSION_WEIGHTS[d.id] for d in dimensions)
    overall = round_half_up(sum(d.score * DIMENSION_WEIGHTS[d.id] for d in dimensions) / total_weight)

    all_checks = [c for d in dimensions for c in d.checks]
    failed_critical = [c for c in all_checks if c.outcome == "fail" and c.severity == "critical"]
    advisories = [c for c in all_checks if c.outcome == "advisory"]

    top_issues = sorted(
        (c for c in all_checks if c.outcome == "fail"),
        key=lambda c: SEVERITY_RANK.get(c.severity, 0),
        reverse=True,
    )[:MAX_TOP_ISSUES]
    strengths = [c.name for c in all_checks if c.outcome == "pass" and c.severity != "info"][:MAX_STRENGTHS]

    logger.debug(
        "Validated %d nodes at tier %s: score=%d, %d critical failures",
        len(nodes), ctx.scale_tier, overall, len(failed_critical),
    )

    return ValidationReport(
        overall_score=overall,
        grade=letter_grade(overall),
        verdict=compute_verdict(overall, len(failed_critical), len(advisories), ctx),
        context=ctx,
        dimensions=dimensions,
        top_issues=top_issues,
        strengths=strengths,
    )
