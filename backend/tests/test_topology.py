"""Tests for topology analysis: critical path, SPOFs, bottleneck and structural flags."""

from archsim.engine.graph import build_graph, sink_nodes, source_nodes
from archsim.engine.topology import analyze_topology
from archsim.models.graph import NodeConfig, SystemEdge, SystemNode
from archsim.models.metrics import TopologyAnalysis


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _node(node_id: str, kind: str, replicas: int = 1) -> SystemNode:
    return SystemNode(id=node_id, component_kind=kind, config=NodeConfig(label=node_id, replicas=replicas))


def _edge(source: str, target: str) -> SystemEdge:
    return SystemEdge(id=f"{source}->{target}", source=source, target=target)


def _basic_web_app(server_replicas: int = 1):
    nodes = [
        _node("client", "web-client"),
        _node("server", "web-server", replicas=server_replicas),
        _node("db", "postgresql"),
    ]
    edges = [_edge("client", "server"), _edge("server", "db")]
    return nodes, edges


# ---------------------------------------------------------------------------
# Graph helpers
# ---------------------------------------------------------------------------


class TestGraphHelpers:
    def test_sources_and_sinks(self):
        nodes, edges = _basic_web_app()
        graph = build_graph(nodes, edges)
        assert source_nodes(graph) == ["client"]
        assert sink_nodes(graph) == ["db"]

    def test_dangling_edges_ignored(self):
        nodes, edges = _basic_web_app()
        graph = build_graph(nodes, edges + [_edge("server", "ghost")])
        assert "ghost" not in graph
        assert graph.number_of_edges() == 2


# ---------------------------------------------------------------------------
# Critical path
# ---------------------------------------------------------------------------


class TestCriticalPath:
    def test_chain(self):
        nodes, edges = _basic_web_app()
        result = analyze_topology(nodes, edges)
        assert result.critical_path == ["client", "server", "db"]
        assert result.critical_path_latency == 35
        assert result.network_hops == 2

    def test_longest_branch_wins(self):
        nodes = [
            _node("client", "web-client"),
            _node("cache", "redis-cache"),
            _node("db", "postgresql"),
        ]
        edges = [_edge("client", "cache"), _edge("client", "db")]
        result = analyze_topology(nodes, edges)
        assert result.critical_path == ["client", "db"]

    def test_ties_keep_first_discovered(self):
        nodes = [
            _node("client", "web-client"),
            _node("a", "web-server"),
            _node("b", "web-server"),
        ]
        edges = [_edge("client", "a"), _edge("client", "b")]
        result = analyze_topology(nodes, edges)
        assert result.critical_path == ["client", "a"]

    def test_cycle_without_source_falls_back_to_first_node(self):
        nodes = [_node("a", "web-server"), _node("b", "postgresql")]
        edges = [_edge("a", "b"), _edge("b", "a")]
        result = analyze_topology(nodes, edges)
        assert result.critical_path == ["a"]
        assert result.network_hops == 0

    def test_unknown_kind_contributes_no_latency(self):
        nodes = [_node("client", "web-client"), _node("x", "quantum-mainframe")]
        edges = [_edge("client", "x")]
        result = analyze_topology(nodes, edges)
        assert result.critical_path == ["client", "x"]
        assert result.critical_path_latency == 5


# ---------------------------------------------------------------------------
# SPOFs
# ---------------------------------------------------------------------------


class TestSinglePointsOfFailure:
    def test_basic_web_app_spofs(self):
        nodes, edges = _basic_web_app()
        result = analyze_topology(nodes, edges)
        assert result.spof_node_ids == ["server", "db"]

    def test_clients_are_never_spofs(self):
        nodes, edges = _basic_web_app()
        result = analyze_topology(nodes, edges)
        assert "client" not in result.spof_node_ids

    def test_second_replica_removes_spof(self):
        nodes, edges = _basic_web_app(server_replicas=2)
        result = analyze_topology(nodes, edges)
        assert "server" not in result.spof_node_ids
        assert "db" in result.spof_node_ids

    def test_critical_path_rule_flags_node_with_alternate_route(self):
        # b has a bypass through c but still carries the critical path unreplicated
        nodes = [
            _node("client", "web-client"),
            _node("a", "load-balancer", replicas=2),
            _node("b", "postgresql"),
            _node("c", "redis-cache", replicas=2),
            _node("sink", "object-storage", replicas=2),
        ]
        edges = [
            _edge("client", "a"),
            _edge("a", "b"),
            _edge("a", "c"),
            _edge("b", "sink"),
            _edge("c", "sink"),
        ]
        result = analyze_topology(nodes, edges)
        assert result.critical_path == ["client", "a", "b", "sink"]
        assert result.spof_node_ids == ["b"]

    def test_observability_nodes_excluded(self):
        nodes = [_node("client", "web-client"), _node("metrics", "metrics-collector")]
        edges = [_edge("client", "metrics")]
        result = analyze_topology(nodes, edges)
        assert result.spof_node_ids == []


# ---------------------------------------------------------------------------
# Bottleneck and flags
# ---------------------------------------------------------------------------


class TestBottleneckAndFlags:
    def test_bottleneck_is_lowest_capacity_on_path(self):
        nodes, edges = _basic_web_app()
        assert analyze_topology(nodes, edges).bottleneck_node_id == "server"

    def test_bottleneck_moves_after_scaling(self):
        nodes, edges = _basic_web_app(server_replicas=3)
        assert analyze_topology(nodes, edges).bottleneck_node_id == "db"

    def test_structural_flags(self):
        nodes, edges = _basic_web_app()
        nodes.append(_node("queue", "message-queue"))
        nodes.append(_node("cache", "redis-cache"))
        result = analyze_topology(nodes, edges)
        assert result.has_clients
        assert result.has_storage
        assert result.has_caches
        assert result.has_queues

    def test_redundancy_groups(self):
        nodes, edges = _basic_web_app()
        nodes.append(_node("server2", "web-server"))
        groups = analyze_topology(nodes, edges).redundancy_groups
        assert groups["web-server"] == ["server", "server2"]

    def test_empty_graph(self):
        assert analyze_topology([], []) == TopologyAnalysis()

    def test_repeated_calls_identical(self):
        nodes, edges = _basic_web_app()
        assert analyze_topology(nodes, edges) == analyze_topology(nodes, edges)
