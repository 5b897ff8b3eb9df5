"""Shared helpers for turning node/edge lists into a NetworkX graph."""

from __future__ import annotations

import logging
from typing import Sequence

import networkx as nx

from archsim.models.graph import SystemEdge, SystemNode

logger = logging.getLogger(__name__)


def build_graph(nodes: Sequence[SystemNode], edges: Sequence[SystemEdge]) -> nx.DiGraph:
    """Build a directed graph with each node's model stored under the ``node`` attribute.

    Node order follows *nodes*; successor order follows *edges*. Edges whose
    endpoints are not in *nodes* are dropped.
    """
    graph = nx.DiGraph()
    for node in nodes:
        graph.add_node(node.id, node=node)

    for edge in edges:
        if edge.source not in graph or edge.target not in graph:
            logger.debug("Ignoring dangling edge %s (%s -> %s)", edge.id, edge.source, edge.target)
            continue
        graph.add_edge(edge.source, edge.target, id=edge.id)

    return graph


def source_nodes(graph: nx.DiGraph) -> list[str]:
    """Nodes with no incoming edge, in insertion order."""
    return [nid for nid in graph.nodes if graph.in_degree(nid) == 0]


def sink_nodes(graph: nx.DiGraph) -> list[str]:
    """Nodes with no outgoing edge, in insertion order."""
    return [nid for nid in graph.nodes if graph.out_degree(nid) == 0]

