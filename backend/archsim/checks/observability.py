"""Observability checks."""

from archsim.engine.check_registry import CheckContext, register_check
from archsim.models.validation import ValidationCheck


@register_check("observability")
def metrics_collection(c: CheckContext) -> ValidationCheck:
    if c.has_kind("metrics-collector"):
        return ValidationCheck(
            id="obs-metrics",
            name="Metrics Collection",
            outcome="pass",
            severity="warning",
            score_impact=40,
            context_note="Metrics collector monitors system health.",
            explanation="Metrics collection in place.",
        )
    if not c.ctx.thresholds.requires_observability:
        return ValidationCheck(
            id="obs-metrics",
            name="No Metrics Collection",
            outcome="advisory",
            severity="info",
            score_impact=0,
            context_note=(
                f"Observability is optional at {c.ctx.scale_tier_label}. "
                "The simulator provides built-in metrics."
            ),
            explanation="No metrics collector node.",
            advisory_note="Add Prometheus/Datadog when you need production-grade monitoring.",
            scale_tier_trigger="scale",
        )
    return ValidationCheck(
        id="obs-metrics",
        name="No Metrics Collection",
        outcome="fail",
        severity="warning",
        score_impact=40,
        context_note=f"At {c.ctx.scale_tier_label}, you cannot operate without metrics.",
        explanation="No metrics collector in the architecture.",
        fix="Add a Metrics Collector (Prometheus/Datadog) for monitoring.",
    )


@register_check("observability")
def distributed_tracing(c: CheckContext) -> ValidationCheck:
    if c.has_kind("distributed-tracer"):
        return ValidationCheck(
            id="obs-tracing",
            name="Distributed Tracing",
            outcome="pass",
            severity="info",
            score_impact=30,
            context_note="Request tracing across services is enabled.",
            explanation="Distributed tracing present.",
        )
    return ValidationCheck(
        id="obs-tracing",
        name="No Distributed Tracing",
        outcome="advisory",
        severity="info",
        score_impact=0,
        context_note=(
            "Tracing is beneficial for microservice debugging but optional "
            f"at {c.ctx.scale_tier_label}."
        ),
        explanation="No distributed tracing.",
        advisory_note="Add Jaeger/Zipkin when debugging cross-service latency issues.",
        scale_tier_trigger="scale",
    )


@register_check("observability")
def log_aggregation(c: CheckContext) -> ValidationCheck:
    if c.has_kind("log-aggregator"):
        return ValidationCheck(
            id="obs-logs",
            name="Log Aggregation",
            outcome="pass",
            severity="info",
            score_impact=30,
            context_note="Centralized log aggregation in place.",
            explanation="Log aggregation present.",
        )
    return ValidationCheck(
        id="obs-logs",
        name="No Log Aggregation",
        outcome="advisory",
        severity="info",
        score_impact=0,
        context_note=f"Centralized logs are recommended but optional at {c.ctx.scale_tier_label}.",
        explanation="No centralized log aggregation.",
        advisory_note="Add a Log Aggregator for production log management.",
        scale_tier_trigger="scale",
    )
