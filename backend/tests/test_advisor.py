"""Tests for the architecture advisor."""

from archsim.engine.advisor import advise
from archsim.engine.metrics import compute_metrics
from archsim.engine.topology import analyze_topology
from archsim.models.graph import NodeConfig, SystemEdge, SystemNode


def _node(node_id: str, kind: str, replicas: int = 1) -> SystemNode:
    return SystemNode(id=node_id, component_kind=kind, config=NodeConfig(label=node_id, replicas=replicas))


def _edge(source: str, target: str) -> SystemEdge:
    return SystemEdge(id=f"{source}->{target}", source=source, target=target)


def _advise(nodes, edges, traffic_load):
    topology = analyze_topology(nodes, edges)
    return advise(nodes, edges, compute_metrics(nodes, edges, traffic_load), topology.spof_node_ids)


class TestClassicalAdvice:
    def test_basic_web_app(self):
        nodes = [_node("client", "web-client"), _node("server", "web-server"), _node("db", "postgresql")]
        edges = [_edge("client", "server"), _edge("server", "db")]
        messages = _advise(nodes, edges, 1000)

        assert [m.id for m in messages] == ["classical-spof", "no-lb"]
        assert messages[0].title == "2 Classical SPOFs"
        assert messages[0].body.startswith("server, db")
        assert messages[1].action_kind == "load-balancer"

    def test_small_graph_needs_no_load_balancer(self):
        nodes = [_node("client", "web-client"), _node("server", "web-server", replicas=2)]
        edges = [_edge("client", "server")]
        assert _advise(nodes, edges, 100) == []

    def test_empty_graph(self):
        assert _advise([], [], 1000) == []


class TestAIAdvice:
    def test_overloaded_lone_llm(self):
        nodes = [_node("client", "web-client"), _node("llm", "llm-inference")]
        edges = [_edge("client", "llm")]
        messages = _advise(nodes, edges, 1000)

        assert [m.id for m in messages] == [
            "ai-spof",
            "high-hallucination",
            "gpu-oom",
            "no-guardrails",
            "no-rag",
            "no-llm-observability",
        ]
        assert messages[0].title == "1 AI SPOF Detected"
        assert "GPU memory at 100%" in messages[2].body

    def test_priority_order_is_stable(self):
        nodes = [_node("client", "web-client"), _node("llm", "llm-inference")]
        edges = [_edge("client", "llm")]
        order = {"critical": 0, "warning": 1, "optimization": 2, "learning": 3}
        types = [m.type for m in _advise(nodes, edges, 1000)]
        assert types == sorted(types, key=order.get)

    def test_agent_without_memory(self):
        nodes = [_node("client", "web-client"), _node("agent", "agent-orchestrator", replicas=2)]
        edges = [_edge("client", "agent")]
        assert [m.id for m in _advise(nodes, edges, 10)] == ["agent-no-memory"]

    def test_capped_at_six(self):
        nodes = [
            _node("client", "web-client"),
            _node("lb", "load-balancer"),
            _node("server", "web-server"),
            _node("llm", "llm-inference"),
            _node("llm2", "llm-inference"),
            _node("agent", "agent-orchestrator"),
            _node("db", "postgresql"),
        ]
        edges = [
            _edge("client", "lb"),
            _edge("lb", "server"),
            _edge("server", "llm"),
            _edge("server", "llm2"),
            _edge("server", "agent"),
            _edge("server", "db"),
        ]
        messages = _advise(nodes, edges, 1000)
        assert len(messages) == 6
        assert messages[0].type == "critical"


def _agent_system(*extra_kinds: str):
    """Agent-driven LLM app with every node replicated so no SPOF advice is raised."""
    nodes = [
        _node("client", "web-client"),
        _node("agent", "agent-orchestrator", replicas=2),
        _node("llm", "llm-inference", replicas=2),
        _node("guard", "guardrails", replicas=2),
    ]
    edges = [_edge("client", "agent"), _edge("agent", "llm"), _edge("llm", "guard")]
    for kind in extra_kinds:
        nodes.append(_node(kind, kind, replicas=2))
        edges.append(_edge("agent", kind))
    return nodes, edges


class TestAIMetricThresholds:
    def test_ungrounded_llm_has_high_hallucination_risk(self):
        nodes = [_node("client", "web-client"), _node("llm", "llm-inference")]
        edges = [_edge("client", "llm")]
        messages = {m.id: m for m in _advise(nodes, edges, 10)}
        assert messages["high-hallucination"].type == "critical"
        assert "65%" in messages["high-hallucination"].body

    def test_grounded_llm_has_no_hallucination_advice(self):
        nodes = [
            _node("client", "web-client"),
            _node("llm", "llm-inference"),
            _node("vdb", "vector-database"),
        ]
        edges = [_edge("client", "llm"), _edge("llm", "vdb")]
        ids = [m.id for m in _advise(nodes, edges, 10)]
        assert "high-hallucination" not in ids
        assert "no-rag" not in ids

    def test_tool_using_agent_fills_context_window(self):
        nodes, edges = _agent_system("rag-pipeline", "memory-store", "tool-executor")
        messages = {m.id: m for m in _advise(nodes, edges, 10)}
        assert "context-nearly-full" in messages
        assert "85%" in messages["context-nearly-full"].body

    def test_agent_without_tools_keeps_context_headroom(self):
        nodes, edges = _agent_system("rag-pipeline", "memory-store")
        assert "context-nearly-full" not in [m.id for m in _advise(nodes, edges, 10)]

    def test_multi_step_agent_suggests_model_router(self):
        nodes, edges = _agent_system("memory-store")
        ids = [m.id for m in _advise(nodes, edges, 10)]
        assert ids == ["add-model-router", "no-llm-observability", "no-lb"]

    def test_single_call_llm_needs_no_model_router(self):
        nodes = [
            _node("client", "web-client"),
            _node("llm", "llm-inference", replicas=2),
            _node("guard", "guardrails", replicas=2),
        ]
        edges = [_edge("client", "llm"), _edge("llm", "guard")]
        assert "add-model-router" not in [m.id for m in _advise(nodes, edges, 10)]

    def test_model_router_present_silences_advice(self):
        nodes, edges = _agent_system("memory-store", "model-router")
        assert "add-model-router" not in [m.id for m in _advise(nodes, edges, 10)]
