"""Simulation tick driver: per-node health, alerts and the metric snapshot for one tick."""

from __future__ import annotations

import itertools
import logging
from typing import Callable, Optional, Sequence

from archsim.engine.catalog import definition_for, effective_capacity
from archsim.engine.load import propagate_load
from archsim.engine.metrics import compute_metrics, load_error_rate, round_half_up
from archsim.engine.topology import analyze_topology
from archsim.models.graph import SystemEdge, SystemNode
from archsim.models.metrics import NodeUpdate, SimulationResult, SystemAlert

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]

WARNING_LOAD_RATIO = 0.8
CRITICAL_LOAD_RATIO = 1.0
CAPACITY_ALERT_RATIO = 0.9

FEEDBACK_MESSAGES: dict[str, str] = {
    "add-redis-cache": (
        "Cache added: est. latency reduced by ~60%. Cache hit rate assumed 80%. Watch DB load drop."
    ),
    "add-memcached": "Cache added: est. latency reduced by ~60%. Cache hit rate assumed 80%.",
    "add-load-balancer": (
        "Load Balancer added: throughput doubled, availability improved. Round Robin distributes evenly."
    ),
    "add-api-gateway": "API Gateway added: centralized routing, auth and rate limiting.",
    "add-cdn": "CDN added: static content served from edge. Latency reduced for global users.",
    "add-message-queue": (
        "Queue added: producers and consumers decoupled, throughput buffered. "
        "Latency up by ~15ms but resilience improved."
    ),
    "add-event-stream": "Kafka added: event-driven architecture enabled. High throughput with replay capability.",
    "add-web-server": (
        "Compute added: additional processing capacity. Consider a load balancer for traffic distribution."
    ),
    "add-microservice": (
        "Microservice added: independent deployment and scaling. Watch for network latency between services."
    ),
    "add-postgresql": (
        "PostgreSQL added: strong consistency (ACID), CP under CAP theorem. Watch for write scalability limits."
    ),
    "add-mongodb": "MongoDB added: flexible schema, horizontal scaling. AP under CAP with eventual consistency.",
    "add-cassandra": "Cassandra added: massive write throughput, multi-DC replication. AP under CAP.",
}


def sequential_ids(prefix: str, start: int = 1) -> IdFactory:
    """Return a factory producing ``"<prefix>-<n>"`` ids from *start* upwards."""
    counter = itertools.count(start)
    return lambda: f"{prefix}-{next(counter)}"


def next_alert_number(alerts: Sequence[SystemAlert]) -> int:
    """One past the highest ``alert-<n>`` id in *alerts*."""
    highest = 0
    for alert in alerts:
        prefix, _, suffix = alert.id.rpartition("-")
        if prefix == "alert" and suffix.isdigit():
            highest = max(highest, int(suffix))
    return highest + 1


def spof_message(label: str) -> str:
    return f"{label} is a single point of failure"


def capacity_message(label: str, load_ratio: float) -> str:
    return f"{label} at {round_half_up(load_ratio * 100)}% capacity - consider scaling"


def node_status(load_ratio: float, is_failed: bool) -> str:
    if is_failed:
        return "failed"
    if load_ratio > CRITICAL_LOAD_RATIO:
        return "critical"
    if load_ratio > WARNING_LOAD_RATIO:
        return "warning"
    return "healthy"


def tick(
    nodes: Sequence[SystemNode],
    edges: Sequence[SystemEdge],
    traffic_load: float,
    previous_alerts: Sequence[SystemAlert],
    id_factory: Optional[IdFactory] = None,
) -> SimulationResult:
    """Advance the simulation by one tick.

    Nodes are not mutated; their new state is returned in ``node_updates``.
    Only alerts whose message is not already in *previous_alerts* are returned.
    Nodes of unknown kind get no update.
    """
    if id_factory is None:
        id_factory = sequential_ids("alert", next_alert_number(previous_alerts))

    topology = analyze_topology(nodes, edges)
    load_map = propagate_load(nodes, edges, traffic_load)
    spofs = set(topology.spof_node_ids)
    seen = {a.message for a in previous_alerts}

    node_updates: dict[str, NodeUpdate] = {}
    alerts: list[SystemAlert] = []

    def emit(alert_type: str, message: str, node_id: str) -> None:
        if message in seen:
            return
        seen.add(message)
        alerts.append(SystemAlert(id=id_factory(), type=alert_type, message=message, node_id=node_id))

    for node in nodes:
        definition = definition_for(node)
        if definition is None:
            continue

        incoming = load_map.get(node.id, 0.0)
        capacity = effective_capacity(node, definition)
        ratio = incoming / capacity if capacity > 0 else 0.0

        if node.is_failed:
            error_rate = 1.0
        else:
            error_rate = load_error_rate(ratio, definition.failure_rate_at_capacity)

        is_spof = node.id in spofs
        node_updates[node.id] = NodeUpdate(
            current_load=ratio,
            current_rps=incoming,
            error_rate=error_rate,
            status=node_status(ratio, node.is_failed),
            is_bottleneck=topology.bottleneck_node_id == node.id,
            is_spof=is_spof,
        )

        if is_spof:
            emit("warning", spof_message(node.config.label), node.id)
        if ratio > CAPACITY_ALERT_RATIO:
            emit("error", capacity_message(node.config.label, ratio), node.id)

    if alerts:
        logger.debug("Tick emitted %d new alert(s)", len(alerts))

    return SimulationResult(
        metrics=compute_metrics(nodes, edges, traffic_load),
        node_updates=node_updates,
        alerts=alerts,
        bottleneck_node_ids=[topology.bottleneck_node_id] if topology.bottleneck_node_id else [],
        spof_node_ids=topology.spof_node_ids,
    )


def feedback_for(
    action: str,
    component_kind: str,
    id_factory: Optional[IdFactory] = None,
) -> Optional[SystemAlert]:
    """Educational success alert for a user action, or ``None`` when there is nothing to say."""
    message = FEEDBACK_MESSAGES.get(f"{action}-{component_kind}")
    if message is None:
        return None
    alert_id = id_factory() if id_factory is not None else f"feedback-{action}-{component_kind}"
    return SystemAlert(id=alert_id, type="success", message=message)
