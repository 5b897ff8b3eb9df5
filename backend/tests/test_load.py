"""Tests for load propagation."""

import pytest

from archsim.engine.load import propagate_load
from archsim.models.graph import NodeConfig, SystemEdge, SystemNode


def _node(node_id: str, kind: str = "web-server") -> SystemNode:
    return SystemNode(id=node_id, component_kind=kind, config=NodeConfig(label=node_id))


def _edge(source: str, target: str) -> SystemEdge:
    return SystemEdge(id=f"{source}->{target}", source=source, target=target)


class TestPropagateLoad:
    def test_chain_conserves_load(self):
        nodes = [_node("a", "web-client"), _node("b"), _node("c", "postgresql")]
        edges = [_edge("a", "b"), _edge("b", "c")]
        assert propagate_load(nodes, edges, 1000) == {"a": 1000, "b": 1000, "c": 1000}

    def test_fan_out_splits_evenly(self):
        nodes = [_node("src", "web-client"), _node("left"), _node("right")]
        edges = [_edge("src", "left"), _edge("src", "right")]
        load = propagate_load(nodes, edges, 1000)
        assert load["left"] == 500
        assert load["right"] == 500

    def test_traffic_split_across_sources(self):
        nodes = [_node("web", "web-client"), _node("mobile", "mobile-client"), _node("server")]
        edges = [_edge("web", "server"), _edge("mobile", "server")]
        load = propagate_load(nodes, edges, 1000)
        assert load["web"] == 500
        assert load["mobile"] == 500
        assert load["server"] == 1000

    def test_fan_in_accumulates(self):
        nodes = [_node("src", "web-client"), _node("a"), _node("b"), _node("db", "postgresql")]
        edges = [_edge("src", "a"), _edge("src", "b"), _edge("a", "db"), _edge("b", "db")]
        assert propagate_load(nodes, edges, 800)["db"] == pytest.approx(800)

    def test_unreached_nodes_get_zero(self):
        nodes = [_node("src", "web-client"), _node("a"), _node("x"), _node("y")]
        edges = [_edge("src", "a"), _edge("x", "y"), _edge("y", "x")]
        load = propagate_load(nodes, edges, 100)
        assert load["x"] == 0
        assert load["y"] == 0

    def test_cycle_terminates(self):
        nodes = [_node("src", "web-client"), _node("a"), _node("b")]
        edges = [_edge("src", "a"), _edge("a", "b"), _edge("b", "a")]
        load = propagate_load(nodes, edges, 100)
        assert load["a"] == pytest.approx(200)
        assert load["b"] == pytest.approx(100)

    def test_every_node_reported(self):
        nodes = [_node("a"), _node("b")]
        assert set(propagate_load(nodes, [], 10)) == {"a", "b"}

    def test_empty_graph(self):
        assert propagate_load([], [], 1000) == {}
