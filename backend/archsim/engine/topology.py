"""Graph topology analysis: critical path, single points of failure, bottleneck and structural flags.

Every call recomputes from scratch; nothing is cached between calls.
"""

from __future__ import annotations

from typing import Sequence

import networkx as nx

from archsim.engine.catalog import CACHE_KINDS, definition_for, effective_capacity, get_definition
from archsim.engine.graph import build_graph, sink_nodes, source_nodes
from archsim.models.graph import SystemEdge, SystemNode
from archsim.models.metrics import TopologyAnalysis

# Categories that never count as single points of failure
NON_SPOF_CATEGORIES = frozenset({"clients", "observability"})


def analyze_topology(nodes: Sequence[SystemNode], edges: Sequence[SystemEdge]) -> TopologyAnalysis:
    """Run the full topology analysis over *nodes* and *edges*."""
    if not nodes:
        return TopologyAnalysis()

    graph = build_graph(nodes, edges)
    path, latency = find_critical_path(graph)
    spofs = find_spofs(graph, path)
    bottleneck = find_bottleneck(graph, path)

    categories = set()
    for node in nodes:
        definition = get_definition(node.component_kind)
        if definition is not None:
            categories.add(definition.category)

    return TopologyAnalysis(
        critical_path=path,
        critical_path_latency=latency,
        spof_node_ids=spofs,
        bottleneck_node_id=bottleneck,
        network_hops=max(0, len(path) - 1),
        redundancy_groups=find_redundancy_groups(nodes),
        has_clients="clients" in categories,
        has_storage="storage" in categories,
        has_caches=any(n.component_kind in CACHE_KINDS for n in nodes),
        has_queues="messaging" in categories,
    )


# ------------------------------------------------------------------
# Critical path
# ------------------------------------------------------------------

def _node_latency(graph: nx.DiGraph, node_id: str) -> float:
    definition = definition_for(graph.nodes[node_id]["node"])
    return definition.base_latency if definition is not None else 0.0


def find_critical_path(graph: nx.DiGraph) -> tuple[list[str], float]:
    """Return the highest-latency simple path from any source to a leaf.

    A leaf is a node with no unvisited successor. Only a strictly longer path
    replaces the current best, so the first discovered path wins ties. With
    no sources (a pure cycle) the first node stands in as the whole path.
    """
    if graph.number_of_nodes() == 0:
        return [], 0.0

    latencies = {nid: _node_latency(graph, nid) for nid in graph.nodes}
    first = next(iter(graph.nodes))
    sources = source_nodes(graph)
    if not sources:
        return [first], latencies[first]

    best_path: list[str] = []
    best_latency = 0.0

    def dfs(node_id: str, path: list[str], total: float, visited: set[str]) -> None:
        nonlocal best_path, best_latency
        total += latencies[node_id]
        path.append(node_id)

        unvisited = [n for n in graph.successors(node_id) if n not in visited]
        if not unvisited:
            if total > best_latency:
                best_latency = total
                best_path = list(path)
        else:
            for nxt in unvisited:
                visited.add(nxt)
                dfs(nxt, path, total, visited)
                visited.discard(nxt)

        path.pop()

    for src in sources:
        dfs(src, [], 0.0, {src})

    if not best_path:
        return [first], latencies[first]
    return best_path, best_latency


# ------------------------------------------------------------------
# Single points of failure
# ------------------------------------------------------------------

def _is_spof_candidate(node: SystemNode) -> bool:
    definition = get_definition(node.component_kind)
    if definition is not None and definition.category in NON_SPOF_CATEGORIES:
        return False
    return True


def find_spofs(graph: nx.DiGraph, critical_path: list[str]) -> list[str]:
    """Union of structural cut-vertices and unreplicated critical-path nodes.

    Rule 1: removing the node makes a previously reachable sink unreachable
    from some source. Rule 2: the node sits on the critical path with a
    single replica, even when an alternate route exists.
    """
    sources = source_nodes(graph)
    sinks = sink_nodes(graph)
    reach_before = {src: nx.descendants(graph, src) | {src} for src in sources}

    spofs: list[str] = []
    for node_id, attrs in graph.nodes(data=True):
        node: SystemNode = attrs["node"]
        if not _is_spof_candidate(node) or node.config.replicas > 1:
            continue

        without = nx.restricted_view(graph, [node_id], [])
        for src in sources:
            if src == node_id:
                continue
            reach_after = nx.descendants(without, src) | {src}
            if any(
                sink != node_id and sink not in reach_after and sink in reach_before[src]
                for sink in sinks
            ):
                spofs.append(node_id)
                break

    for node_id in critical_path:
        node = graph.nodes[node_id]["node"]
        if not _is_spof_candidate(node):
            continue
        if node.config.replicas <= 1 and node_id not in spofs:
            spofs.append(node_id)

    return spofs


# ------------------------------------------------------------------
# Bottleneck / redundancy
# ------------------------------------------------------------------

def find_bottleneck(graph: nx.DiGraph, critical_path: list[str]) -> str | None:
    """The non-client critical-path node with the lowest effective capacity."""
    bottleneck: str | None = None
    min_capacity = float("inf")
    for node_id in critical_path:
        node = graph.nodes[node_id]["node"]
        definition = definition_for(node)
        if definition is None or definition.category == "clients":
            continue
        capacity = effective_capacity(node, definition)
        if capacity < min_capacity:
            min_capacity = capacity
            bottleneck = node_id
    return bottleneck


def find_redundancy_groups(nodes: Sequence[SystemNode]) -> dict[str, list[str]]:
    """Group node ids by component kind."""
    groups: dict[str, list[str]] = {}
    for node in nodes:
        groups.setdefault(node.component_kind, []).append(node.id)
    return groups
