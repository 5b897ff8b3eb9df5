"""Performance & scalability checks."""

from archsim.engine.catalog import CACHE_KINDS, DATABASE_KINDS
from archsim.engine.check_registry import CheckContext, register_check
from archsim.models.validation import ValidationCheck


def _latency_fix(c: CheckContext) -> str:
    if not c.has_kind(*CACHE_KINDS) and c.has_kind(*DATABASE_KINDS):
        return (
            "Add a Redis Cache between your server and database. "
            "Cache hit rates of 80%+ can reduce latency by 60%."
        )
    return (
        "Identify the highest-latency component and add more instances "
        "or caching upstream of it."
    )


@register_check("performance")
def p99_latency(c: CheckContext) -> ValidationCheck:
    p99 = c.metrics.latency_p99
    threshold = c.ctx.thresholds.max_acceptable_p99_ms

    if p99 <= threshold * 0.5:
        return ValidationCheck(
            id="perf-latency",
            name="Latency Excellent",
            outcome="pass",
            severity="info",
            score_impact=30,
            context_note=(
                f"P99 of {p99:.0f}ms is well under {threshold:.0f}ms target "
                f"for {c.ctx.scale_tier_label}."
            ),
            explanation=(
                f"P99: {p99:.0f}ms. Target: <{threshold:.0f}ms. "
                f"{(1 - p99 / threshold) * 100:.0f}% headroom."
            ),
        )
    if p99 <= threshold:
        return ValidationCheck(
            id="perf-latency",
            name="Latency Within Target",
            outcome="pass",
            severity="info",
            score_impact=20,
            context_note=(
                f"P99 of {p99:.0f}ms meets the {threshold:.0f}ms target for {c.ctx.scale_tier_label}."
            ),
            explanation=f"P99: {p99:.0f}ms. Target: <{threshold:.0f}ms.",
        )
    return ValidationCheck(
        id="perf-latency",
        name="P99 Latency Exceeds Target",
        outcome="fail",
        severity="critical" if p99 > threshold * 2 else "warning",
        score_impact=30,
        context_note=(
            f"P99 of {p99:.0f}ms exceeds {threshold:.0f}ms target for {c.ctx.scale_tier_label}."
        ),
        explanation=f"P99 latency is {p99:.0f}ms, {(p99 / threshold) * 100 - 100:.0f}% over the limit.",
        fix=_latency_fix(c),
    )


@register_check("performance")
def error_rate(c: CheckContext) -> ValidationCheck:
    rate = c.metrics.error_rate

    if rate < 0.001:
        return ValidationCheck(
            id="perf-errors",
            name="Error Rate Excellent",
            outcome="pass",
            severity="info",
            score_impact=25,
            context_note=f"Error rate is {rate * 100:.3f}%, effectively zero.",
            explanation=f"{rate * 100:.3f}% error rate. Industry standard: <0.1%.",
        )
    if rate < 0.01:
        return ValidationCheck(
            id="perf-errors",
            name="Error Rate Acceptable",
            outcome="pass",
            severity="info",
            score_impact=15,
            context_note=f"{rate * 100:.2f}% error rate is within acceptable bounds.",
            explanation=f"Error rate: {rate * 100:.2f}%.",
        )
    return ValidationCheck(
        id="perf-errors",
        name="High Error Rate",
        outcome="fail",
        severity="critical" if rate > 0.05 else "warning",
        score_impact=25,
        context_note=f"{rate * 100:.1f}% error rate is unacceptable at any scale.",
        explanation=f"{rate * 100:.1f}% of requests are failing.",
        fix="Identify the bottleneck node. Add capacity or a circuit breaker for graceful degradation.",
    )


@register_check("performance")
def cache_layer(c: CheckContext) -> ValidationCheck:
    has_db = c.has_kind(*DATABASE_KINDS)
    read_ratio = c.metrics.db_read_write_ratio
    if read_ratio is None:
        read_ratio = 0.5

    if c.has_kind("redis-cache", "memcached", "prompt-cache"):
        hit_rate = c.metrics.cache_hit_rate
        if hit_rate is not None:
            note = f"Cache hit rate: {hit_rate * 100:.0f}%, reducing DB load."
        else:
            note = "Cache layer reducing database read load."
        return ValidationCheck(
            id="perf-cache",
            name="Cache Layer Present",
            outcome="pass",
            severity="info",
            score_impact=15,
            context_note=note,
            explanation="A caching layer is present.",
        )
    if not c.ctx.thresholds.requires_cache or not has_db:
        return ValidationCheck(
            id="perf-cache",
            name="No Cache Layer",
            outcome="advisory",
            severity="info",
            score_impact=0,
            context_note=f"At {c.ctx.scale_tier_label}, caching is a performance enhancement, not a requirement.",
            explanation="No caching layer found. All reads go directly to the database.",
            advisory_note=(
                "Add Redis or Memcached when DB reads become a bottleneck. "
                "Typically worthwhile at 1K+ req/s."
            ),
            scale_tier_trigger="startup",
        )
    return ValidationCheck(
        id="perf-cache",
        name=f"No Cache Layer ({read_ratio * 100:.0f}% DB reads)",
        outcome="fail",
        severity="warning",
        score_impact=15,
        context_note=(
            f"At {c.ctx.scale_tier_label} with {read_ratio * 100:.0f}% read ratio, a cache would "
            "serve most traffic without hitting the DB."
        ),
        explanation="No caching layer between servers and database.",
        fix=(
            "Add a Redis Cache between your server tier and database. "
            "Configure TTL appropriate to your data freshness needs."
        ),
    )


@register_check("performance")
def edge_caching(c: CheckContext) -> ValidationCheck:
    if c.has_kind("cdn"):
        return ValidationCheck(
            id="perf-cdn",
            name="CDN for Edge Caching",
            outcome="pass",
            severity="info",
            score_impact=10,
            context_note="CDN serves static assets from edge locations, reducing origin load.",
            explanation="CDN present for edge caching.",
        )
    if c.ctx.scale_tier in ("prototype", "startup"):
        return ValidationCheck(
            id="perf-cdn",
            name="No CDN",
            outcome="advisory",
            severity="info",
            score_impact=0,
            context_note=f"CDN is optional at {c.ctx.scale_tier_label}.",
            explanation="No CDN to serve static assets closer to users.",
            advisory_note="Add a CDN when you need global low-latency asset delivery. Recommended at Growth stage.",
            scale_tier_trigger="growth",
        )
    return ValidationCheck(
        id="perf-cdn",
        name="No CDN",
        outcome="advisory",
        severity="warning",
        score_impact=10,
        context_note=f"At {c.ctx.scale_tier_label}, a CDN significantly reduces origin load and latency.",
        explanation="No CDN present. All assets served from origin.",
        advisory_note="Add a CDN to serve static assets with low latency globally.",
        scale_tier_trigger="growth",
    )
