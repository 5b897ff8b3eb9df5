"""Architecture advisor: prioritised, rule-based recommendations for the current graph."""

from __future__ import annotations

from typing import Sequence

from archsim.engine.catalog import is_ai_kind
from archsim.engine.metrics import round_half_up
from archsim.models.graph import SystemEdge, SystemNode
from archsim.models.metrics import MetricSnapshot
from archsim.models.validation import AdvisorMessage

MAX_MESSAGES = 6
PRIORITY = {"critical": 0, "warning": 1, "optimization": 2, "learning": 3}


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


def advise(
    nodes: Sequence[SystemNode],
    edges: Sequence[SystemEdge],
    metrics: MetricSnapshot,
    spof_ids: Sequence[str],
) -> list[AdvisorMessage]:
    """Return up to six recommendations ordered critical, warning, optimization, learning."""
    kinds = [n.component_kind for n in nodes]
    spofs = set(spof_ids)
    ai_nodes = [n for n in nodes if is_ai_kind(n.component_kind)]
    ai_spofs = [n for n in ai_nodes if n.id in spofs]
    is_ai_system = bool(ai_nodes)
    has_llm = "llm-inference" in kinds
    ai = metrics.ai_metrics

    messages: list[AdvisorMessage] = []

    # --- critical / high-impact ---
    if ai_spofs:
        verb = "are" if len(ai_spofs) > 1 else "is"
        messages.append(AdvisorMessage(
            id="ai-spof",
            type="critical",
            title=f"{_plural(len(ai_spofs), 'AI SPOF')} Detected",
            body=(
                f"{', '.join(n.config.label for n in ai_spofs)} {verb} a single point of failure. "
                "A GPU failure will take down your AI feature. Add redundant instances "
                "or a fallback model via Model Router."
            ),
        ))

    if has_llm and "guardrails" not in kinds:
        messages.append(AdvisorMessage(
            id="no-guardrails",
            type="warning",
            title="No Output Guardrails on LLM",
            body=(
                "Your LLM serves responses directly to users with no validation. Without guardrails, "
                "harmful content and prompt injections reach users. Add Guardrails; it adds only ~20ms."
            ),
            action_label="Add Guardrails",
            action_kind="guardrails",
        ))

    if ai is not None and ai.hallucination_risk > 0.6:
        messages.append(AdvisorMessage(
            id="high-hallucination",
            type="critical",
            title="Critical Hallucination Risk",
            body=(
                f"Hallucination risk is {round_half_up(ai.hallucination_risk * 100)}%. Add a RAG Pipeline to "
                "ground responses in verified facts, or connect a Guardrails filter."
            ),
            action_label="Add RAG Pipeline",
            action_kind="rag-pipeline",
        ))

    if ai is not None and ai.gpu_memory_pressure > 0.9:
        messages.append(AdvisorMessage(
            id="gpu-oom",
            type="critical",
            title="GPU Memory Near Limit (OOM Risk)",
            body=(
                f"GPU memory at {round_half_up(ai.gpu_memory_pressure * 100)}%. At 100%, your LLM crashes. "
                "Add more GPU instances, reduce batch size, or quantize."
            ),
        ))

    # --- warnings ---
    if has_llm and "prompt-cache" not in kinds and ai is not None and ai.token_throughput > 50_000:
        messages.append(AdvisorMessage(
            id="no-prompt-cache",
            type="warning",
            title="High Token Volume Without Prompt Cache",
            body=(
                f"At {ai.token_throughput / 1000:.0f}k tokens/sec, a Prompt Cache could serve "
                "~35% of similar queries without the LLM."
            ),
            action_label="Add Prompt Cache",
            action_kind="prompt-cache",
        ))

    if has_llm and "vector-database" not in kinds and ai is not None and ai.hallucination_risk > 0.4:
        messages.append(AdvisorMessage(
            id="no-rag",
            type="warning",
            title="LLM Without Grounding: Consider RAG",
            body=(
                "Your LLM generates answers entirely from training data. A RAG pipeline with "
                "Vector Database reduces hallucination by ~60%."
            ),
            action_label="Add RAG Pipeline",
            action_kind="rag-pipeline",
        ))

    if "agent-orchestrator" in kinds and "memory-store" not in kinds:
        messages.append(AdvisorMessage(
            id="agent-no-memory",
            type="warning",
            title="Agent Has No Persistent Memory",
            body=(
                "Your Agent Orchestrator has no Memory Store. Each session starts from scratch. "
                "Add a Memory Store for context persistence."
            ),
            action_label="Add Memory Store",
            action_kind="memory-store",
        ))

    if (
        has_llm
        and "ai-gateway" not in kinds
        and any(k in kinds for k in ("web-server", "load-balancer", "api-gateway"))
    ):
        messages.append(AdvisorMessage(
            id="no-ai-gateway",
            type="warning",
            title="No AI Gateway: Uncontrolled LLM Access",
            body=(
                "Without an AI Gateway, you have no rate limiting or cost control for LLM. "
                "One runaway client could exhaust GPU capacity."
            ),
            action_label="Add AI Gateway",
            action_kind="ai-gateway",
        ))

    if has_llm and ai is not None and ai.context_utilization > 0.8:
        messages.append(AdvisorMessage(
            id="context-nearly-full",
            type="warning",
            title="Context Window Nearly Full",
            body=(
                f"Context utilization at {round_half_up(ai.context_utilization * 100)}%. At 100%, older context "
                "is truncated. Add conversation summarization or chunk context more aggressively."
            ),
        ))

    # --- optimizations ---
    if (
        has_llm
        and "model-router" not in kinds
        and len(ai_nodes) > 1
        and ai is not None
        and ai.ai_cost_per_1k_requests > 5
    ):
        messages.append(AdvisorMessage(
            id="add-model-router",
            type="optimization",
            title="Add Model Router to Cut AI Costs",
            body=(
                f"AI cost is ${ai.ai_cost_per_1k_requests:.2f}/1k requests. A Model Router could reduce "
                "costs 40-70% by sending simple queries to cheaper models."
            ),
            action_label="Add Model Router",
            action_kind="model-router",
        ))

    if has_llm and "llm-observability" not in kinds:
        messages.append(AdvisorMessage(
            id="no-llm-observability",
            type="optimization",
            title="No LLM Observability",
            body=(
                "Without LLM observability, you cannot see which prompts fail, token costs by endpoint, "
                "or latency sources. Add LLM Observability."
            ),
            action_label="Add LLM Observability",
            action_kind="llm-observability",
        ))

    if is_ai_system and "drift-detector" not in kinds and ("postgresql" in kinds or "feature-store" in kinds):
        messages.append(AdvisorMessage(
            id="no-drift-detection",
            type="optimization",
            title="No Model Drift Detection",
            body=(
                "Input distributions shift over time and your model silently degrades. "
                "A Drift Detector alerts you before quality impact."
            ),
            action_label="Add Drift Detector",
            action_kind="drift-detector",
        ))

    classical_spofs = [
        n for n in nodes
        if not is_ai_kind(n.component_kind)
        and n.id in spofs
        and n.component_kind not in ("web-client", "mobile-client")
    ]
    if classical_spofs:
        messages.append(AdvisorMessage(
            id="classical-spof",
            type="warning",
            title=_plural(len(classical_spofs), "Classical SPOF"),
            body=f"{', '.join(n.config.label for n in classical_spofs)}: add replicas for redundancy.",
        ))

    if "load-balancer" not in kinds and len(nodes) > 2:
        messages.append(AdvisorMessage(
            id="no-lb",
            type="optimization",
            title="No Load Balancer",
            body="Consider adding a Load Balancer to distribute incoming traffic and improve availability.",
            action_label="Add Load Balancer",
            action_kind="load-balancer",
        ))

    messages.sort(key=lambda m: PRIORITY[m.type])
    return messages[:MAX_MESSAGES]
