"""Scale-tier resolution: infer how demanding the architecture's operating scale is.

Four independent signals (traffic, structural complexity, component mix and
the active scenario) each vote for a tier; the most demanding vote wins and
selects the threshold set the validator grades against.
"""

from __future__ import annotations

from typing import Optional, Sequence

from archsim.engine.catalog import DATABASE_KINDS, SERVER_KINDS, is_ai_kind
from archsim.models.graph import SystemEdge, SystemNode
from archsim.models.metrics import MetricSnapshot
from archsim.models.scenario import ScenarioDefinition
from archsim.models.validation import (
    ContextThresholds,
    ContextualVerdict,
    ScaleTier,
    ScaleTierSignals,
    ValidationContext,
)

TIER_ORDER: list[str] = ["prototype", "startup", "growth", "scale", "enterprise"]

TIER_LABELS: dict[str, str] = {
    "prototype": "Prototype (≤500 req/s)",
    "startup": "Startup (500–5K req/s)",
    "growth": "Growth (5K–50K req/s)",
    "scale": "At Scale (50K–500K req/s)",
    "enterprise": "Enterprise / Internet Scale (500K+ req/s)",
}

TIER_THRESHOLDS: dict[str, ContextThresholds] = {
    "prototype": ContextThresholds(
        max_acceptable_p99_ms=2000,
        min_acceptable_availability=0.95,
        replicas_required_for_ha=1,
        requires_load_balancer=False,
        requires_cache=False,
        requires_observability=False,
        requires_guardrails=False,
    ),
    "startup": ContextThresholds(
        max_acceptable_p99_ms=1000,
        min_acceptable_availability=0.99,
        replicas_required_for_ha=1,
        requires_load_balancer=False,
        requires_cache=False,
        requires_observability=False,
        requires_guardrails=False,
    ),
    "growth": ContextThresholds(
        max_acceptable_p99_ms=500,
        min_acceptable_availability=0.999,
        replicas_required_for_ha=2,
        requires_load_balancer=True,
        requires_cache=True,
        requires_observability=False,
        requires_guardrails=False,
    ),
    "scale": ContextThresholds(
        max_acceptable_p99_ms=200,
        min_acceptable_availability=0.9999,
        replicas_required_for_ha=2,
        requires_load_balancer=True,
        requires_cache=True,
        requires_observability=True,
        requires_guardrails=True,
    ),
    "enterprise": ContextThresholds(
        max_acceptable_p99_ms=100,
        min_acceptable_availability=0.99999,
        replicas_required_for_ha=3,
        requires_load_balancer=True,
        requires_cache=True,
        requires_observability=True,
        requires_guardrails=True,
    ),
}

SCENARIO_TIERS: dict[str, str] = {
    "basic-web-app": "startup",
    "design-twitter": "enterprise",
    "netflix-streaming": "enterprise",
    "ride-sharing": "scale",
    "url-shortener": "growth",
    "flash-sale": "scale",
    "distributed-database": "scale",
    "build-chatgpt": "enterprise",
    "rag-enterprise": "scale",
    "multi-agent": "scale",
    "fraud-detection": "enterprise",
    "scale-llm-100m": "enterprise",
}

ENTERPRISE_INDICATORS = frozenset(
    {"training-cluster", "drift-detector", "ab-test-controller", "feature-store", "data-warehouse"}
)
SCALE_INDICATORS = frozenset(
    {"cdn", "distributed-tracer", "llm-observability", "model-registry", "agent-orchestrator"}
)
GROWTH_INDICATORS = frozenset(
    {"message-queue", "api-gateway", "reverse-proxy", "metrics-collector", "rag-pipeline", "event-stream", "pub-sub"}
)

QUEUE_KINDS = frozenset({"message-queue", "event-stream", "pub-sub"})
MLOPS_KINDS = frozenset({"training-cluster", "model-registry", "feature-store", "drift-detector"})
OBSERVABILITY_KINDS = frozenset({"metrics-collector", "log-aggregator", "distributed-tracer"})
ADVANCED_AI_KINDS = frozenset({"agent-orchestrator", "rag-pipeline", "model-router", "llm-observability"})

# (minimum score, tier), checked from the top
COMPLEXITY_BUCKETS: list[tuple[int, str]] = [
    (12, "enterprise"),
    (8, "scale"),
    (5, "growth"),
    (2, "startup"),
]


# ------------------------------------------------------------------
# Signals
# ------------------------------------------------------------------

def traffic_tier(rps: float) -> ScaleTier:
    if rps <= 500:
        return "prototype"
    if rps <= 5_000:
        return "startup"
    if rps <= 50_000:
        return "growth"
    if rps <= 500_000:
        return "scale"
    return "enterprise"


def complexity_score(nodes: Sequence[SystemNode], edges: Sequence[SystemEdge]) -> int:
    """Weighted point score of structural complexity."""
    kinds = [n.component_kind for n in nodes]
    node_count = len(nodes)
    server_count = sum(1 for k in kinds if k in SERVER_KINDS)
    regions = {n.config.region for n in nodes if n.config.region}

    score = 0
    if node_count >= 4:
        score += 1
    if node_count >= 8:
        score += 1
    if node_count >= 14:
        score += 2
    if node_count >= 20:
        score += 2
    if len(edges) >= 8:
        score += 1
    if server_count >= 3:
        score += 2
    if server_count >= 5:
        score += 2
    if len({k for k in kinds if k in DATABASE_KINDS}) >= 2:
        score += 1
    if any(k in QUEUE_KINDS for k in kinds):
        score += 2
    if "cdn" in kinds:
        score += 2
    if len(regions) >= 2:
        score += 3
    if any(k in MLOPS_KINDS for k in kinds):
        score += 3
    if sum(1 for k in kinds if k in OBSERVABILITY_KINDS) >= 2:
        score += 2
    if sum(1 for k in kinds if k in ADVANCED_AI_KINDS) >= 2:
        score += 2
    return score


def complexity_tier(nodes: Sequence[SystemNode], edges: Sequence[SystemEdge]) -> ScaleTier:
    score = complexity_score(nodes, edges)
    for minimum, tier in COMPLEXITY_BUCKETS:
        if score >= minimum:
            return tier
    return "prototype"


def component_mix_tier(nodes: Sequence[SystemNode]) -> ScaleTier:
    kinds = {n.component_kind for n in nodes}
    if kinds & ENTERPRISE_INDICATORS:
        return "enterprise"
    if kinds & SCALE_INDICATORS:
        return "scale"
    if kinds & GROWTH_INDICATORS:
        return "growth"
    return "prototype"


def scenario_tier(scenario_id: str) -> ScaleTier:
    return SCENARIO_TIERS.get(scenario_id, "startup")


def max_tier(*tiers: Optional[str]) -> ScaleTier:
    """The most demanding of *tiers*; ``None`` entries are ignored."""
    best = "prototype"
    for tier in tiers:
        if tier is not None and TIER_ORDER.index(tier) > TIER_ORDER.index(best):
            best = tier
    return best


# ------------------------------------------------------------------
# Context resolution
# ------------------------------------------------------------------

def resolve_validation_context(
    nodes: Sequence[SystemNode],
    edges: Sequence[SystemEdge],
    metrics: MetricSnapshot,
    traffic_load: float,
    traffic_pattern: str,
    scenario: Optional[ScenarioDefinition] = None,
) -> ValidationContext:
    """Resolve the scale tier and the thresholds checks are graded against.

    *metrics* is accepted for interface symmetry with the validator; tier
    inference does not depend on it.
    """
    signals = ScaleTierSignals(
        traffic_tier=traffic_tier(traffic_load),
        complexity_tier=complexity_tier(nodes, edges),
        component_tier=component_mix_tier(nodes),
        scenario_tier=scenario_tier(scenario.id) if scenario is not None else None,
        resolved_tier="prototype",
    )
    resolved = max_tier(
        signals.traffic_tier, signals.complexity_tier, signals.component_tier, signals.scenario_tier
    )
    signals.resolved_tier = resolved

    # scenario targets override the tier defaults
    thresholds = TIER_THRESHOLDS[resolved].model_copy()
    if scenario is not None:
        if scenario.targets.max_latency_p95 is not None:
            thresholds.max_acceptable_p99_ms = scenario.targets.max_latency_p95
        if scenario.targets.min_availability is not None:
            thresholds.min_acceptable_availability = scenario.targets.min_availability

    server_count = sum(1 for n in nodes if n.component_kind in SERVER_KINDS)
    db_count = sum(1 for n in nodes if n.component_kind in DATABASE_KINDS)

    return ValidationContext(
        current_rps=traffic_load,
        traffic_pattern=traffic_pattern,
        scale_tier=resolved,
        scale_tier_label=TIER_LABELS[resolved],
        scale_tier_signals=signals,
        mode="scenario" if scenario is not None else "freeform",
        scenario_name=scenario.name if scenario is not None else None,
        component_count=len(nodes),
        has_ai_components=any(is_ai_kind(n.component_kind) for n in nodes),
        is_monolith=server_count <= 1 and db_count <= 1,
        thresholds=thresholds,
    )


# ------------------------------------------------------------------
# Verdict
# ------------------------------------------------------------------

def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def compute_verdict(
    overall_score: int,
    failed_critical_count: int,
    advisory_count: int,
    ctx: ValidationContext,
) -> ContextualVerdict:
    """Pick the headline badge from (critical failures, score, tier)."""
    if failed_critical_count == 0 and overall_score >= 85:
        if advisory_count > 0:
            detail = (
                "Your architecture handles current requirements effectively. "
                f"{_plural(advisory_count, 'advisory item')} to address before scaling to the next tier."
            )
        else:
            detail = "No significant gaps detected."
        return ContextualVerdict(
            badge="Production Ready" if ctx.scale_tier == "enterprise" else "Sound Architecture",
            badge_color="#00ff88",
            headline=f"Well-designed for {ctx.scale_tier_label}.",
            detail=detail,
            is_positive=True,
        )

    if failed_critical_count == 0 and overall_score >= 65:
        return ContextualVerdict(
            badge="Functional - Gaps to Address",
            badge_color="#ffb800",
            headline=(
                f"Functionally correct at {ctx.scale_tier_label}, "
                "with gaps to address before scaling."
            ),
            detail=(
                f"No critical failures at your current traffic level ({ctx.current_rps:,.0f} req/s). "
                "The advisory items will become requirements as traffic grows."
            ),
            is_positive=True,
        )

    if failed_critical_count == 0 and ctx.scale_tier == "prototype" and overall_score >= 50:
        return ContextualVerdict(
            badge="Appropriate for Scale",
            badge_color="#00f5ff",
            headline=f"Reasonable prototype architecture at {ctx.scale_tier_label}.",
            detail=(
                "Single-instance components and minimal redundancy are acceptable at this scale. "
                "The advisory items will matter when you target higher availability or traffic."
            ),
            is_positive=True,
        )

    issues = _plural(failed_critical_count, "Critical Issue")
    return ContextualVerdict(
        badge=issues,
        badge_color="#ff3860",
        headline=f"{_plural(failed_critical_count, 'critical issue')} require attention.",
        detail=(
            "These issues cause real problems at your current scale and traffic level. "
            "Address the top issues first."
        ),
        is_positive=False,
    )
