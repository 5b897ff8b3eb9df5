"""Tests for the metrics calculator."""

import pytest

from archsim.engine.metrics import compute_metrics, load_error_rate, round_half_up
from archsim.models.graph import NodeConfig, SystemEdge, SystemNode
from archsim.models.metrics import MetricSnapshot


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _node(node_id: str, kind: str, replicas: int = 1, failed: bool = False) -> SystemNode:
    return SystemNode(
        id=node_id,
        component_kind=kind,
        config=NodeConfig(label=node_id, replicas=replicas),
        is_failed=failed,
    )


def _edge(source: str, target: str) -> SystemEdge:
    return SystemEdge(id=f"{source}->{target}", source=source, target=target)


def _basic_web_app(server_failed: bool = False):
    nodes = [
        _node("client", "web-client"),
        _node("server", "web-server", failed=server_failed),
        _node("db", "postgresql"),
    ]
    edges = [_edge("client", "server"), _edge("server", "db")]
    return nodes, edges


def _load_balanced_web_app():
    nodes = [
        _node("client", "web-client"),
        _node("lb", "load-balancer"),
        _node("server", "web-server", replicas=2),
        _node("db", "postgresql"),
    ]
    edges = [_edge("client", "lb"), _edge("lb", "server"), _edge("server", "db")]
    return nodes, edges


# ---------------------------------------------------------------------------
# Basic web app
# ---------------------------------------------------------------------------


class TestBasicWebApp:
    def test_reference_snapshot(self):
        nodes, edges = _basic_web_app()
        m = compute_metrics(nodes, edges, 1000)

        assert m.throughput == 1000
        assert m.latency_p50 == 39
        assert m.latency_p95 == 55
        assert m.latency_p99 == 82
        assert m.availability == pytest.approx(0.99995)
        assert m.error_rate == pytest.approx(0.05)
        assert m.network_hops == 2
        assert m.scalability_score == 50
        assert m.monthly_cost == 250

    def test_storage_derived_fields(self):
        nodes, edges = _basic_web_app()
        m = compute_metrics(nodes, edges, 1000)
        assert m.consistency_model == "Strong"
        assert m.cap_state == "CP"
        assert m.db_read_write_ratio == 0.8
        assert m.cache_hit_rate is None
        assert m.queue_depth is None
        assert m.ai_metrics is None

    def test_deterministic(self):
        nodes, edges = _basic_web_app()
        assert compute_metrics(nodes, edges, 1000) == compute_metrics(nodes, edges, 1000)

    def test_low_load_has_no_errors(self):
        nodes, edges = _basic_web_app()
        assert compute_metrics(nodes, edges, 100).error_rate == 0

    def test_failed_node_on_critical_path(self):
        nodes, edges = _basic_web_app(server_failed=True)
        assert compute_metrics(nodes, edges, 100).error_rate == 1.0

    def test_scaling_improves_score(self):
        basic = compute_metrics(*_basic_web_app(), 1000)
        balanced = compute_metrics(*_load_balanced_web_app(), 1000)
        assert balanced.scalability_score == 65
        assert balanced.scalability_score > basic.scalability_score


# ---------------------------------------------------------------------------
# Individual formulas
# ---------------------------------------------------------------------------


class TestFormulas:
    @pytest.mark.parametrize(
        "ratio, expected",
        [(0.5, 0.0), (0.8, 0.0), (0.9, 0.05), (1.5, 0.35), (5.0, 1.0)],
    )
    def test_load_error_rate(self, ratio, expected):
        assert load_error_rate(ratio, 0.1) == pytest.approx(expected)

    def test_throughput_capped_by_bottleneck(self):
        nodes = [_node("client", "web-client"), _node("llm", "llm-inference")]
        edges = [_edge("client", "llm")]
        assert compute_metrics(nodes, edges, 1000).throughput == 50

    def test_availability_bounds(self):
        nodes = [_node("client", "web-client"), _node("cdn", "cdn", replicas=2)]
        edges = [_edge("client", "cdn")]
        m = compute_metrics(nodes, edges, 10)
        assert m.availability == 0.99999

    def test_cache_lowers_latency(self):
        nodes, edges = _basic_web_app()
        without = compute_metrics(nodes, edges, 100)
        nodes.append(_node("cache", "redis-cache"))
        edges.append(_edge("server", "cache"))
        with_cache = compute_metrics(nodes, edges, 100)
        assert with_cache.latency_p50 < without.latency_p50
        assert with_cache.cache_hit_rate == pytest.approx(0.82)

    def test_mixed_cap_state(self):
        nodes, edges = _basic_web_app()
        nodes.append(_node("cache", "redis-cache"))
        m = compute_metrics(nodes, edges, 100)
        assert m.cap_state == "CP + AP (mixed)"
        assert m.consistency_model == "Eventual"

    def test_queue_depth_tracks_excess(self):
        nodes, edges = _basic_web_app()
        nodes.append(_node("queue", "message-queue"))
        m = compute_metrics(nodes, edges, 1500)
        assert m.throughput == 1000
        assert m.queue_depth == 50

    def test_empty_graph(self):
        assert compute_metrics([], [], 1000) == MetricSnapshot()


# ---------------------------------------------------------------------------
# AI metrics
# ---------------------------------------------------------------------------


class TestAIMetrics:
    def test_lone_llm(self):
        nodes = [_node("client", "web-client"), _node("llm", "llm-inference")]
        edges = [_edge("client", "llm")]
        ai = compute_metrics(nodes, edges, 10).ai_metrics

        assert ai is not None
        assert ai.token_throughput == 5000
        assert ai.ttft_p95 == 200
        assert ai.gpu_memory_pressure == pytest.approx(0.55)
        assert ai.hallucination_risk == pytest.approx(0.65)
        assert ai.context_utilization == pytest.approx(0.35)
        assert ai.ai_cost_per_1k_requests == 5.0

    def test_grounding_lowers_hallucination_risk(self):
        nodes = [
            _node("client", "web-client"),
            _node("llm", "llm-inference"),
            _node("vdb", "vector-database"),
            _node("guard", "guardrails"),
        ]
        edges = [_edge("client", "llm"), _edge("llm", "vdb"), _edge("llm", "guard")]
        ai = compute_metrics(nodes, edges, 10).ai_metrics
        assert ai.hallucination_risk == pytest.approx(0.13)
        assert ai.rag_retrieval_accuracy == pytest.approx(0.72)

    def test_overloaded_llm_saturates_gpu(self):
        nodes = [_node("client", "web-client"), _node("llm", "llm-inference")]
        edges = [_edge("client", "llm")]
        ai = compute_metrics(nodes, edges, 1000).ai_metrics
        assert ai.gpu_memory_pressure == 1.0
        assert ai.token_throughput == 25_000

    def test_agent_loop_fills_context_and_multiplies_cost(self):
        nodes = [
            _node("client", "web-client"),
            _node("agent", "agent-orchestrator"),
            _node("llm", "llm-inference"),
            _node("rag", "rag-pipeline"),
            _node("memory", "memory-store"),
            _node("tools", "tool-executor"),
        ]
        edges = [
            _edge("client", "agent"),
            _edge("agent", "llm"),
            _edge("agent", "rag"),
            _edge("agent", "memory"),
            _edge("agent", "tools"),
        ]
        ai = compute_metrics(nodes, edges, 10).ai_metrics
        assert ai.agent_steps_avg == 6
        assert ai.context_utilization == pytest.approx(0.85)
        # six LLM calls of 500 tokens each
        assert ai.ai_cost_per_1k_requests == 30.0

    def test_prompt_cache_and_router_cut_cost(self):
        nodes = [
            _node("client", "web-client"),
            _node("llm", "llm-inference"),
            _node("cache", "prompt-cache"),
            _node("router", "model-router"),
        ]
        edges = [_edge("client", "router"), _edge("router", "cache"), _edge("cache", "llm")]
        ai = compute_metrics(nodes, edges, 10).ai_metrics
        # 5.0 * 0.65 * 0.6
        assert ai.ai_cost_per_1k_requests == 1.95


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------


class TestRounding:
    @pytest.mark.parametrize("value, expected", [(0.5, 1), (1.5, 2), (2.5, 3), (2.49, 2), (54.6, 55), (0, 0)])
    def test_halves_round_up(self, value, expected):
        assert round_half_up(value) == expected
