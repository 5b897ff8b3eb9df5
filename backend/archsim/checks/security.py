"""Security & compliance checks."""

from archsim.checks.data_integrity import has_direct_client_db_edge
from archsim.engine.check_registry import CheckContext, register_check
from archsim.models.validation import ValidationCheck

TLS_EDGE_KINDS = ("cdn", "api-gateway", "reverse-proxy", "load-balancer")


@register_check("security")
def api_gateway(c: CheckContext) -> ValidationCheck:
    if c.has_kind("api-gateway"):
        return ValidationCheck(
            id="sec-gw",
            name="API Gateway Present",
            outcome="pass",
            severity="warning",
            score_impact=30,
            context_note="API Gateway handles rate limiting, auth enforcement, and request validation.",
            explanation="API Gateway found at ingress.",
        )
    if c.ctx.scale_tier == "prototype":
        return ValidationCheck(
            id="sec-gw",
            name="No API Gateway",
            outcome="advisory",
            severity="info",
            score_impact=0,
            context_note=(
                f"API Gateway is optional at {c.ctx.scale_tier_label}. "
                "Direct server access is acceptable for prototyping."
            ),
            explanation="No API Gateway for centralized rate limiting or auth.",
            advisory_note=(
                "Add an API Gateway when you need auth enforcement, rate limiting, "
                "or multiple client types."
            ),
            scale_tier_trigger="startup",
        )
    return ValidationCheck(
        id="sec-gw",
        name="No API Gateway",
        outcome="advisory",
        severity="warning",
        score_impact=15,
        context_note=f"At {c.ctx.scale_tier_label}, an API Gateway is recommended for centralized security.",
        explanation="No API Gateway for rate limiting, auth, or validation.",
        advisory_note="Add an API Gateway between external clients and your server tier.",
        scale_tier_trigger="startup",
    )


@register_check("security")
def web_application_firewall(c: CheckContext) -> ValidationCheck:
    if c.has_kind("firewall-waf"):
        return ValidationCheck(
            id="sec-waf",
            name="WAF / Firewall Present",
            outcome="pass",
            severity="warning",
            score_impact=25,
            context_note="WAF protects against common web attacks (SQLi, XSS, DDoS).",
            explanation="Firewall/WAF found at ingress.",
        )
    if c.ctx.scale_tier in ("prototype", "startup"):
        return ValidationCheck(
            id="sec-waf",
            name="No WAF/Firewall",
            outcome="advisory",
            severity="info",
            score_impact=0,
            context_note=f"WAF is not required at {c.ctx.scale_tier_label}.",
            explanation="No Web Application Firewall.",
            advisory_note="Add a WAF when your system is public-facing and handles untrusted input.",
            scale_tier_trigger="growth",
        )
    return ValidationCheck(
        id="sec-waf",
        name="No WAF/Firewall",
        outcome="advisory",
        severity="warning",
        score_impact=15,
        context_note=f"At {c.ctx.scale_tier_label}, a WAF is strongly recommended.",
        explanation="No WAF to protect against web attacks.",
        advisory_note="Add a Firewall/WAF at the ingress point for DDoS, SQLi, and XSS protection.",
        scale_tier_trigger="growth",
    )


@register_check("security")
def database_not_exposed(c: CheckContext) -> ValidationCheck:
    if has_direct_client_db_edge(c):
        return ValidationCheck(
            id="sec-no-direct-db",
            name="Database Directly Exposed",
            outcome="fail",
            severity="critical",
            score_impact=25,
            context_note="Clients can reach your database directly, bypassing all security controls.",
            explanation="Direct client to database edge found.",
            fix="Route all traffic through server or gateway layers.",
        )
    return ValidationCheck(
        id="sec-no-direct-db",
        name="No Direct DB Exposure",
        outcome="pass",
        severity="critical",
        score_impact=25,
        context_note="Database is not directly exposed to clients.",
        explanation="All data access goes through server/gateway layers.",
    )


@register_check("security")
def tls_termination(c: CheckContext) -> ValidationCheck:
    if c.has_kind(*TLS_EDGE_KINDS):
        return ValidationCheck(
            id="sec-tls",
            name="TLS Termination",
            outcome="pass",
            severity="info",
            score_impact=10,
            context_note="TLS is handled at the edge (CDN/Gateway/LB).",
            explanation="Edge component handles TLS.",
        )
    return ValidationCheck(
        id="sec-tls",
        name="TLS Termination",
        outcome="advisory",
        severity="info",
        score_impact=5,
        context_note="No centralized TLS termination point detected.",
        explanation="No CDN, LB, or API Gateway for TLS termination.",
        advisory_note="Add a CDN or API Gateway to handle TLS termination.",
        scale_tier_trigger="startup",
    )
