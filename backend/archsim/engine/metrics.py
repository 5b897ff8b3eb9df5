"""Metrics calculator: derives a MetricSnapshot from topology, propagated load and the catalog.

All functions here are pure: the same (nodes, edges, traffic_load) always yields the same snapshot.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from archsim.engine.catalog import (
    CACHE_KINDS,
    definition_for,
    effective_capacity,
    get_definition,
    is_ai_kind,
)
from archsim.engine.load import propagate_load
from archsim.engine.topology import analyze_topology
from archsim.models.graph import SystemEdge, SystemNode
from archsim.models.metrics import AIMetrics, MetricSnapshot, TopologyAnalysis

AVAILABILITY_CEILING = 0.99999
HOP_LATENCY_MS = 2
CACHE_LATENCY_FACTOR = 0.6
P95_FACTOR = 1.4
P99_FACTOR = 2.1

TOKENS_PER_REQUEST = 500
COST_PER_1K_TOKENS = 0.01
UNGROUNDED_HALLUCINATION_RISK = 0.65


def round_half_up(value: float) -> int:
    """Nearest integer, with halves rounded up."""
    return math.floor(value + 0.5)


def compute_metrics(
    nodes: Sequence[SystemNode],
    edges: Sequence[SystemEdge],
    traffic_load: float,
) -> MetricSnapshot:
    """Compute the full system metric snapshot for the current graph and traffic load."""
    if not nodes:
        return MetricSnapshot()

    topology = analyze_topology(nodes, edges)
    load_map = propagate_load(nodes, edges, traffic_load)
    by_id = {n.id: n for n in nodes}

    throughput = compute_throughput(by_id, topology, traffic_load)
    p50, p95, p99 = compute_latency(nodes, by_id, topology)

    ai_metrics = None
    if any(is_ai_kind(n.component_kind) for n in nodes):
        ai_metrics = compute_ai_metrics(nodes, load_map)

    return MetricSnapshot(
        throughput=throughput,
        latency_p50=p50,
        latency_p95=p95,
        latency_p99=p99,
        availability=compute_availability(by_id, topology),
        error_rate=compute_error_rate(by_id, topology, load_map),
        network_hops=topology.network_hops,
        consistency_model=compute_consistency(nodes),
        cache_hit_rate=compute_cache_hit_rate(nodes, topology),
        db_read_write_ratio=compute_db_read_write_ratio(nodes),
        scalability_score=compute_scalability_score(nodes, topology),
        monthly_cost=compute_monthly_cost(nodes),
        queue_depth=compute_queue_depth(topology, traffic_load, throughput),
        cap_state=compute_cap_state(nodes),
        ai_metrics=ai_metrics,
    )


# ------------------------------------------------------------------
# Shared formulas
# ------------------------------------------------------------------

def load_error_rate(load_ratio: float, failure_rate_at_capacity: float) -> float:
    """Error probability for a node running at *load_ratio* of its capacity.

    Linear ramp from 80% to 100% utilisation, then climbing by 0.5 per unit
    of overload, capped at 1.
    """
    if load_ratio > 1:
        return min(1.0, failure_rate_at_capacity + (load_ratio - 1) * 0.5)
    if load_ratio > 0.8:
        return failure_rate_at_capacity * ((load_ratio - 0.8) / 0.2)
    return 0.0


def _storage_definitions(nodes: Sequence[SystemNode]):
    for node in nodes:
        definition = get_definition(node.component_kind)
        if definition is not None and definition.category == "storage":
            yield definition


# ------------------------------------------------------------------
# Individual metrics
# ------------------------------------------------------------------

def compute_throughput(
    by_id: dict[str, SystemNode], topology: TopologyAnalysis, traffic_load: float
) -> float:
    if not topology.critical_path:
        return 0.0

    min_capacity = float("inf")
    for nid in topology.critical_path:
        node = by_id[nid]
        definition = definition_for(node)
        if definition is None or definition.category == "clients":
            continue
        min_capacity = min(min_capacity, effective_capacity(node, definition))

    if min_capacity == float("inf"):
        return traffic_load
    return min(traffic_load, min_capacity)


def compute_latency(
    nodes: Sequence[SystemNode], by_id: dict[str, SystemNode], topology: TopologyAnalysis
) -> tuple[float, float, float]:
    """P50/P95/P99 from critical-path base latencies plus per-hop overhead."""
    if not topology.critical_path:
        return 0.0, 0.0, 0.0

    total = 0.0
    for nid in topology.critical_path:
        definition = definition_for(by_id[nid])
        if definition is not None:
            total += definition.base_latency
    total += topology.network_hops * HOP_LATENCY_MS

    # caching is treated as global, not path-local
    if any(n.component_kind in CACHE_KINDS for n in nodes):
        total *= CACHE_LATENCY_FACTOR

    return round_half_up(total), round_half_up(total * P95_FACTOR), round_half_up(total * P99_FACTOR)


def compute_availability(by_id: dict[str, SystemNode], topology: TopologyAnalysis) -> float:
    """SPOFs are independent series failure points; non-SPOF nodes do not affect availability."""
    if not topology.spof_node_ids:
        return AVAILABILITY_CEILING

    unavailability = 1.0
    counted = 0
    for nid in topology.spof_node_ids:
        definition = definition_for(by_id[nid])
        if definition is None:
            continue
        unavailability *= 1 - definition.availability_sla
        counted += 1

    if counted == 0:
        return AVAILABILITY_CEILING
    return max(0.0, min(AVAILABILITY_CEILING, 1 - unavailability))


def compute_error_rate(
    by_id: dict[str, SystemNode], topology: TopologyAnalysis, load_map: dict[str, float]
) -> float:
    if not topology.critical_path:
        return 0.0

    if any(by_id[nid].is_failed for nid in topology.critical_path):
        return 1.0

    worst = 0.0
    for nid in topology.critical_path:
        node = by_id[nid]
        definition = definition_for(node)
        if definition is None or definition.category == "clients":
            continue
        capacity = effective_capacity(node, definition)
        if capacity <= 0:
            continue
        ratio = load_map.get(nid, 0.0) / capacity
        worst = max(worst, load_error_rate(ratio, definition.failure_rate_at_capacity))

    return round(worst, 4)


def compute_consistency(nodes: Sequence[SystemNode]) -> str:
    """Most relaxed consistency model among storage nodes."""
    models = {d.consistency_model for d in _storage_definitions(nodes)}
    if not models:
        return "N/A"
    if "eventual" in models:
        return "Eventual"
    if "causal" in models:
        return "Causal"
    return "Strong"


def compute_cap_state(nodes: Sequence[SystemNode]) -> str:
    alignments: list[str] = []
    for definition in _storage_definitions(nodes):
        if definition.cap_alignment not in alignments:
            alignments.append(definition.cap_alignment)

    if not alignments:
        return "N/A"
    if len(alignments) == 1:
        return alignments[0]
    if "CP" in alignments and "AP" in alignments:
        return "CP + AP (mixed)"
    return " + ".join(alignments)


def compute_cache_hit_rate(nodes: Sequence[SystemNode], topology: TopologyAnalysis) -> Optional[float]:
    if not topology.has_caches:
        return None
    replicas = sum(n.config.replicas for n in nodes if n.component_kind in CACHE_KINDS)
    return min(0.95, 0.8 + replicas * 0.02)


def compute_db_read_write_ratio(nodes: Sequence[SystemNode]) -> Optional[float]:
    for node in nodes:
        definition = get_definition(node.component_kind)
        if (
            definition is not None
            and definition.category == "storage"
            and node.component_kind not in CACHE_KINDS
            and node.component_kind != "object-storage"
        ):
            return 0.8
    return None


def compute_scalability_score(nodes: Sequence[SystemNode], topology: TopologyAnalysis) -> float:
    """0-100 heuristic rewarding scalable kinds, load balancing, caching and replicas."""
    non_client = []
    scalable = 0
    for node in nodes:
        definition = get_definition(node.component_kind)
        if definition is None or definition.category == "clients":
            continue
        non_client.append(node)
        if definition.is_horizontally_scalable:
            scalable += 1

    if not non_client:
        return 0

    score = 50.0
    score += (scalable / len(non_client)) * 20
    if any(n.component_kind == "load-balancer" for n in nodes):
        score += 10
    if topology.has_caches:
        score += 10
    score -= len(topology.spof_node_ids) * 5

    avg_replicas = sum(n.config.replicas for n in non_client) / len(non_client)
    if avg_replicas > 1:
        score += min(10.0, (avg_replicas - 1) * 5)

    return max(0, min(100, round_half_up(score)))


def compute_monthly_cost(nodes: Sequence[SystemNode]) -> float:
    total = 0.0
    for node in nodes:
        definition = definition_for(node)
        if definition is None:
            continue
        total += definition.cost_per_instance_per_month * node.config.replicas
    return total


def compute_queue_depth(
    topology: TopologyAnalysis, traffic_load: float, throughput: float
) -> Optional[float]:
    """Backlog proxy: a tenth of the traffic that exceeds throughput."""
    if not topology.has_queues:
        return None
    return round_half_up(max(0.0, traffic_load - throughput) * 0.1)


# ------------------------------------------------------------------
# AI sub-metrics
# ------------------------------------------------------------------

def compute_ai_metrics(nodes: Sequence[SystemNode], load_map: dict[str, float]) -> AIMetrics:
    """Heuristic AI figures driven by which AI kinds are present and how hard the LLM tier is loaded."""
    kinds = {n.component_kind for n in nodes}
    has_rag = "rag-pipeline" in kinds
    has_vector = "vector-database" in kinds
    has_agent = "agent-orchestrator" in kinds
    has_memory = "memory-store" in kinds
    cache_factor = 0.65 if "prompt-cache" in kinds else 1.0

    llm_capacity = 0.0
    llm_load = 0.0
    llm_latency = 0.0
    for node in nodes:
        if node.component_kind != "llm-inference":
            continue
        definition = get_definition(node.component_kind)
        llm_capacity += effective_capacity(node, definition)
        llm_load += load_map.get(node.id, 0.0)
        llm_latency = definition.base_latency

    metrics = AIMetrics()
    if has_agent:
        steps = 3.0
        if "tool-executor" in kinds:
            steps += 2
        if has_memory:
            steps += 1
        metrics.agent_steps_avg = steps

    if llm_capacity > 0:
        ratio = llm_load / llm_capacity
        metrics.token_throughput = round_half_up(min(llm_load, llm_capacity) * TOKENS_PER_REQUEST)
        ttft = llm_latency * 0.25 * (1 + max(0.0, ratio - 0.8) * 2) * cache_factor
        metrics.ttft_p95 = round_half_up(ttft)
        metrics.gpu_memory_pressure = round(min(1.0, 0.45 + 0.5 * ratio), 4)
        context = 0.35 + 0.15 * has_rag + 0.15 * has_memory + 0.1 * has_agent
        if has_agent and "tool-executor" in kinds:
            context += 0.1
        metrics.context_utilization = round(min(0.95, context), 4)

        risk = UNGROUNDED_HALLUCINATION_RISK
        if has_rag or has_vector:
            risk *= 0.4
        if "guardrails" in kinds:
            risk *= 0.5
        metrics.hallucination_risk = round(risk, 4)

        # every agent step is a separate LLM call
        cost = TOKENS_PER_REQUEST * COST_PER_1K_TOKENS * cache_factor * max(1.0, metrics.agent_steps_avg)
        if "model-router" in kinds:
            cost *= 0.6
        metrics.ai_cost_per_1k_requests = round(cost, 2)

    if has_rag or has_vector:
        accuracy = 0.72
        if "embedding-service" in kinds:
            accuracy += 0.08
        if has_rag and has_vector:
            accuracy += 0.05
        metrics.rag_retrieval_accuracy = round(min(0.95, accuracy), 4)

    return metrics
