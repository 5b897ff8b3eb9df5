"""Load propagation: spread an input traffic quantity from source nodes towards sinks."""

from __future__ import annotations

from collections import deque
from typing import Sequence

from archsim.engine.graph import build_graph, source_nodes
from archsim.models.graph import SystemEdge, SystemNode


def propagate_load(
    nodes: Sequence[SystemNode],
    edges: Sequence[SystemEdge],
    traffic_load: float,
) -> dict[str, float]:
    """Return the incoming load of every node.

    Traffic is split evenly across source nodes, then each node hands its
    accumulated load to its successors in equal shares. Nodes are expanded
    at most once (breadth-first), so cycles cannot loop forever; load that
    arrives at a node after it has been expanded stays with that node.
    Unreached nodes get 0.
    """
    graph = build_graph(nodes, edges)
    load: dict[str, float] = {}

    sources = source_nodes(graph)
    per_source = traffic_load / len(sources) if sources else 0.0
    for src in sources:
        load[src] = per_source

    queue: deque[str] = deque(sources)
    visited: set[str] = set()

    while queue:
        node_id = queue.popleft()
        if node_id in visited:
            continue
        visited.add(node_id)

        successors = list(graph.successors(node_id))
        if not successors:
            continue
        share = load.get(node_id, 0.0) / len(successors)
        for nxt in successors:
            load[nxt] = load.get(nxt, 0.0) + share
            queue.append(nxt)

    return {node.id: load.get(node.id, 0.0) for node in nodes}
