"""AI best-practice checks.

Only evaluated when the graph holds at least one AI-category component.
Without an LLM inference node the dimension reduces to a single pass.
"""

from archsim.engine.check_registry import CheckContext, register_check
from archsim.models.validation import ValidationCheck


def _has_llm(c: CheckContext) -> bool:
    return c.has_kind("llm-inference")


def _has_grounding(c: CheckContext) -> bool:
    return c.has_kind("rag-pipeline", "vector-database")


@register_check("ai")
def no_llm_in_topology(c: CheckContext) -> ValidationCheck | None:
    if _has_llm(c):
        return None
    return ValidationCheck(
        id="ai-none",
        name="No AI Components",
        outcome="pass",
        severity="info",
        score_impact=100,
        context_note="No AI-specific checks needed.",
        explanation="No AI components in topology.",
    )


@register_check("ai")
def output_guardrails(c: CheckContext) -> ValidationCheck | None:
    if not _has_llm(c):
        return None
    if c.has_kind("guardrails"):
        return ValidationCheck(
            id="ai-guardrails",
            name="Guardrails on LLM Output",
            outcome="pass",
            severity="critical",
            score_impact=20,
            context_note="Guardrails filter validates LLM output for safety and correctness.",
            explanation="Guardrails node present after LLM inference.",
        )
    if c.ctx.scale_tier == "prototype":
        return ValidationCheck(
            id="ai-guardrails",
            name="No Guardrails on LLM",
            outcome="advisory",
            severity="warning",
            score_impact=5,
            context_note=(
                "Guardrails are recommended even for prototypes, but not blocking "
                f"at {c.ctx.scale_tier_label}."
            ),
            explanation="LLM output has no validation filter.",
            advisory_note=(
                "Add Guardrails before exposing LLM output to users. "
                "Blocks hallucinations, toxic content, and prompt injection."
            ),
            scale_tier_trigger="startup",
        )
    return ValidationCheck(
        id="ai-guardrails",
        name="No Guardrails on LLM",
        outcome="fail",
        severity="critical",
        score_impact=20,
        context_note=f"At {c.ctx.scale_tier_label}, unfiltered LLM output is a safety and compliance risk.",
        explanation=(
            "LLM output has no guardrails. Hallucinations, toxic content, "
            "and prompt injection go unchecked."
        ),
        fix="Add a Guardrails Filter after your LLM Inference node.",
    )


@register_check("ai")
def rag_grounding(c: CheckContext) -> ValidationCheck | None:
    if not _has_llm(c):
        return None
    if _has_grounding(c):
        return ValidationCheck(
            id="ai-rag",
            name="RAG Grounding",
            outcome="pass",
            severity="info",
            score_impact=15,
            context_note="Knowledge grounding reduces hallucination risk.",
            explanation="RAG Pipeline and/or Vector Database present.",
        )
    return ValidationCheck(
        id="ai-rag",
        name="RAG Grounding",
        outcome="advisory",
        severity="warning",
        score_impact=5,
        context_note="No RAG pipeline or vector database for grounding.",
        explanation="LLM relies entirely on training data.",
        advisory_note="Add a RAG Pipeline with Vector Database to reduce hallucination risk.",
        scale_tier_trigger="startup",
    )


@register_check("ai")
def ai_gateway(c: CheckContext) -> ValidationCheck | None:
    if not _has_llm(c):
        return None
    if c.has_kind("ai-gateway"):
        return ValidationCheck(
            id="ai-gw",
            name="AI Gateway",
            outcome="pass",
            severity="info",
            score_impact=15,
            context_note="AI Gateway provides rate limiting, cost tracking, and model routing.",
            explanation="AI Gateway present.",
        )
    return ValidationCheck(
        id="ai-gw",
        name="AI Gateway",
        outcome="advisory",
        severity="warning",
        score_impact=5,
        context_note="No centralized AI traffic management.",
        explanation="No AI Gateway for cost control.",
        advisory_note="Add an AI Gateway for rate limiting, cost tracking, and model routing.",
        scale_tier_trigger="growth",
    )


@register_check("ai")
def prompt_caching(c: CheckContext) -> ValidationCheck | None:
    if not _has_llm(c):
        return None
    if c.has_kind("prompt-cache"):
        return ValidationCheck(
            id="ai-cache",
            name="Prompt Caching",
            outcome="pass",
            severity="info",
            score_impact=10,
            context_note="Prompt cache reduces redundant LLM calls.",
            explanation="Prompt cache present.",
        )
    return ValidationCheck(
        id="ai-cache",
        name="Prompt Caching",
        outcome="advisory",
        severity="info",
        score_impact=0,
        context_note="No prompt caching: identical prompts re-run full inference.",
        explanation="No prompt cache.",
        advisory_note="Add a Prompt Cache to reduce GPU cost on repeated queries.",
        scale_tier_trigger="growth",
    )


@register_check("ai")
def llm_observability(c: CheckContext) -> ValidationCheck | None:
    if not _has_llm(c):
        return None
    if c.has_kind("llm-observability"):
        return ValidationCheck(
            id="ai-obs",
            name="LLM Observability",
            outcome="pass",
            severity="info",
            score_impact=10,
            context_note="LLM observability tracks token costs and quality metrics.",
            explanation="LLM Observability present.",
        )
    return ValidationCheck(
        id="ai-obs",
        name="LLM Observability",
        outcome="advisory",
        severity="info",
        score_impact=0,
        context_note="No LLM-specific monitoring.",
        explanation="Cannot track token costs or model quality.",
        advisory_note="Add LLM Observability to monitor token costs and model performance.",
        scale_tier_trigger="scale",
    )


@register_check("ai")
def llm_redundancy(c: CheckContext) -> ValidationCheck | None:
    llm_nodes = c.nodes_of_kind("llm-inference")
    if not llm_nodes:
        return None

    replicas = sum(n.config.replicas for n in llm_nodes)
    has_router = c.has_kind("model-router")
    if replicas >= 2 or has_router:
        return ValidationCheck(
            id="ai-spof",
            name="LLM Redundancy",
            outcome="pass",
            severity="critical",
            score_impact=15,
            context_note="LLM has redundancy through replicas or model routing.",
            explanation="Model Router provides fallback." if has_router else f"{replicas} LLM replicas.",
        )
    if c.ctx.scale_tier in ("prototype", "startup"):
        return ValidationCheck(
            id="ai-spof",
            name="Single LLM Instance",
            outcome="advisory",
            severity="warning",
            score_impact=5,
            context_note=f"A single LLM instance is acceptable at {c.ctx.scale_tier_label}.",
            explanation="Only 1 LLM inference server.",
            advisory_note="Add a second LLM instance or Model Router for redundancy at higher scale.",
            scale_tier_trigger="growth",
        )
    return ValidationCheck(
        id="ai-spof",
        name="Single LLM Instance (SPOF)",
        outcome="fail",
        severity="critical",
        score_impact=15,
        context_note=f"At {c.ctx.scale_tier_label}, a single LLM server is a critical SPOF.",
        explanation="Single LLM inference server. GPU failure takes down all AI features.",
        fix="Add a second LLM instance or a Model Router with fallback.",
    )


@register_check("ai")
def drift_detection(c: CheckContext) -> ValidationCheck | None:
    # only meaningful when models are retrained in-house
    if not _has_llm(c) or not c.has_kind("training-cluster"):
        return None
    if c.has_kind("drift-detector"):
        return ValidationCheck(
            id="ai-drift",
            name="Model Drift Detection",
            outcome="pass",
            severity="info",
            score_impact=10,
            context_note="Drift detector monitors model quality.",
            explanation="Drift detector present.",
        )
    return ValidationCheck(
        id="ai-drift",
        name="Model Drift Detection",
        outcome="advisory",
        severity="warning",
        score_impact=5,
        context_note="No drift detection on training pipeline.",
        explanation="Training pipeline exists without quality monitoring.",
        advisory_note="Add a Drift Detector to monitor model quality after retraining.",
        scale_tier_trigger="growth",
    )
