"""SimulationWorkspace: owns the live graph, traffic settings, alerts and tick scheduling."""

from __future__ import annotations

import copy
import logging
import random
import time
from typing import Any, Callable, Optional

from archsim.config import settings
from archsim.engine.advisor import advise
from archsim.engine.catalog import get_definition, is_ai_kind
from archsim.engine.history import MetricHistory
from archsim.engine.metrics import compute_metrics
from archsim.engine.scenarios import compute_scenario_progress, get_scenario
from archsim.engine.simulation import feedback_for, sequential_ids, tick
from archsim.engine.topology import analyze_topology
from archsim.engine.traffic import TRAFFIC_PATTERNS, modulate_traffic
from archsim.engine.validator import validate
from archsim.models.graph import GraphTemplate, NodeConfig, SystemEdge, SystemNode
from archsim.models.metrics import MetricSnapshot, SimulationResult, SystemAlert, TopologyAnalysis
from archsim.models.scenario import ScenarioDefinition, ScenarioProgress
from archsim.models.validation import AdvisorMessage, ValidationReport

logger = logging.getLogger(__name__)


class SimulationWorkspace:
    """Graph store plus simulation state for one editing session.

    Node, edge and alert ids come from counters owned by the workspace.
    Every analysis reads the graph as it is at call time; only ``run_tick``
    writes simulation fields back onto the nodes.
    """

    def __init__(
        self,
        traffic_load: Optional[float] = None,
        traffic_pattern: Optional[str] = None,
        speed: Optional[float] = None,
        history_size: Optional[int] = None,
        alert_limit: Optional[int] = None,
        failure_duration: Optional[float] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.nodes: dict[str, SystemNode] = {}
        self.edges: dict[str, SystemEdge] = {}
        self.name: str = "Untitled"
        self.description: Optional[str] = None

        self.default_traffic_load = settings.default_traffic_load if traffic_load is None else traffic_load
        self.traffic_load: float = self.default_traffic_load
        self.traffic_pattern: str = traffic_pattern or settings.default_traffic_pattern
        self.speed: float = speed or settings.simulation_speed
        self.failure_duration: float = failure_duration or settings.failure_duration_seconds
        self.alert_limit: int = alert_limit or settings.alert_history_size
        self.running: bool = True

        self.alerts: list[SystemAlert] = []
        self.history = MetricHistory(history_size or settings.metric_history_size)
        self.last_result: Optional[SimulationResult] = None
        self.tick_count: int = 0
        self.last_tick_at: Optional[float] = None
        self.active_scenario: Optional[ScenarioDefinition] = None

        self._failures: dict[str, float] = {}
        self._initial_template: Optional[dict[str, Any]] = None
        self._rng = rng or random.Random(settings.random_seed)
        self._clock = clock
        self._reset_counters()

    def _reset_counters(self) -> None:
        self._node_ids = sequential_ids("node")
        self._edge_ids = sequential_ids("edge")
        self._alert_ids = sequential_ids("alert")

    def _next_id(self, factory: Callable[[], str], taken: dict[str, Any]) -> str:
        new_id = factory()
        while new_id in taken:
            new_id = factory()
        return new_id

    # ------------------------------------------------------------------
    # Graph loading
    # ------------------------------------------------------------------

    def load_graph(self, template: GraphTemplate | dict[str, Any]) -> None:
        """Replace the current graph with *template* and clear simulation state.

        Raises ``pydantic.ValidationError`` for malformed payloads and
        ``ValueError`` for edges pointing at missing nodes.
        """
        if not isinstance(template, GraphTemplate):
            template = GraphTemplate.model_validate(template)

        node_ids = {n.id for n in template.graph_data.nodes}
        for edge in template.graph_data.edges:
            if edge.source not in node_ids or edge.target not in node_ids:
                raise ValueError(f"Edge '{edge.id}' references an unknown node")

        self.clear()
        for node in template.graph_data.nodes:
            if get_definition(node.component_kind) is None:
                logger.warning("Loaded node %s has unknown kind %r", node.id, node.component_kind)
            if node.id in self.nodes:
                logger.warning("Duplicate node id %s in template; keeping the last definition", node.id)
            self.nodes[node.id] = node.model_copy(deep=True)
        for edge in template.graph_data.edges:
            self.edges[edge.id] = edge.model_copy(update={"is_ai_path": self._is_ai_path(edge.source, edge.target)})

        self.name = template.metadata.name
        self.description = template.metadata.description
        if template.metadata.traffic_load is not None:
            self.traffic_load = template.metadata.traffic_load
        if template.metadata.scenario_id is not None:
            self.active_scenario = get_scenario(template.metadata.scenario_id)

        self._initial_template = template.model_dump()
        logger.info("Loaded graph %r: %d nodes, %d edges", self.name, len(self.nodes), len(self.edges))

    def get_graph_for_render(self) -> dict[str, Any]:
        return {
            "nodes": [n.model_dump() for n in self.nodes.values()],
            "edges": [e.model_dump() for e in self.edges.values()],
        }

    def to_template(self) -> GraphTemplate:
        return GraphTemplate.model_validate({
            "metadata": {
                "name": self.name,
                "description": self.description,
                "traffic_load": self.traffic_load,
                "scenario_id": self.active_scenario.id if self.active_scenario else None,
            },
            "graph_data": self.get_graph_for_render(),
        })

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def get_node(self, node_id: str) -> SystemNode:
        try:
            return self.nodes[node_id]
        except KeyError:
            raise KeyError(f"Node '{node_id}' not found") from None

    def add_node(
        self,
        component_kind: str,
        label: Optional[str] = None,
        config: Optional[dict[str, Any]] = None,
    ) -> SystemNode:
        """Place a new component with its catalog defaults; raises ``ValueError`` for unknown kinds."""
        definition = get_definition(component_kind)
        if definition is None:
            raise ValueError(f"Unknown component kind '{component_kind}'")

        values: dict[str, Any] = {
            "label": definition.name,
            "replicas": 1,
            "region": settings.default_region,
            **definition.default_config,
            **(config or {}),
        }
        if label is not None:
            values["label"] = label

        node = SystemNode(
            id=self._next_id(self._node_ids, self.nodes),
            component_kind=component_kind,
            config=NodeConfig(**values),
        )
        self.nodes[node.id] = node
        logger.debug("Added node %s (%s)", node.id, component_kind)
        return node

    def update_node(self, node_id: str, changes: dict[str, Any]) -> SystemNode:
        """Merge *changes* into the node's config and re-validate it."""
        node = self.get_node(node_id)
        merged = {**node.config.model_dump(), **changes}
        node.config = NodeConfig(**merged)
        return node

    def remove_node(self, node_id: str) -> None:
        """Remove a node and every edge touching it."""
        self.get_node(node_id)
        del self.nodes[node_id]
        self._failures.pop(node_id, None)
        for edge_id in [e.id for e in self.edges.values() if node_id in (e.source, e.target)]:
            del self.edges[edge_id]

    def duplicate_node(self, node_id: str) -> SystemNode:
        original = self.get_node(node_id)
        config = original.config.model_dump()
        config["label"] = f"{original.config.label} (copy)"
        node = SystemNode(
            id=self._next_id(self._node_ids, self.nodes),
            component_kind=original.component_kind,
            config=NodeConfig(**config),
        )
        self.nodes[node.id] = node
        return node

    def add_replica(self, node_id: str) -> bool:
        """Add one replica when the kind scales horizontally; returns whether anything changed."""
        node = self.get_node(node_id)
        definition = get_definition(node.component_kind)
        if definition is None or not definition.is_horizontally_scalable:
            return False
        node.config.replicas += 1
        return True

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def _is_ai_path(self, source: str, target: str) -> bool:
        return any(
            nid in self.nodes and is_ai_kind(self.nodes[nid].component_kind)
            for nid in (source, target)
        )

    def add_edge(self, source: str, target: str) -> SystemEdge:
        """Connect two nodes; an existing connection between them is returned unchanged."""
        self.get_node(source)
        self.get_node(target)
        if source == target:
            raise ValueError("A component cannot connect to itself")

        for edge in self.edges.values():
            if edge.source == source and edge.target == target:
                return edge

        edge = SystemEdge(
            id=self._next_id(self._edge_ids, self.edges),
            source=source,
            target=target,
            is_ai_path=self._is_ai_path(source, target),
        )
        self.edges[edge.id] = edge
        return edge

    def remove_edge(self, edge_id: str) -> None:
        if edge_id not in self.edges:
            raise KeyError(f"Edge '{edge_id}' not found")
        del self.edges[edge_id]

    # ------------------------------------------------------------------
    # Failure injection
    # ------------------------------------------------------------------

    def inject_failure(
        self,
        node_id: str,
        duration: Optional[float] = None,
        now: Optional[float] = None,
    ) -> float:
        """Mark a node failed until ``now + duration``; returns the expiry time."""
        node = self.get_node(node_id)
        now = self._clock() if now is None else now
        expires_at = now + (self.failure_duration if duration is None else duration)
        node.is_failed = True
        node.status = "failed"
        self._failures[node_id] = expires_at
        logger.info("Injected failure into %s until t=%.1f", node_id, expires_at)
        return expires_at

    def clear_failure(self, node_id: str) -> None:
        node = self.get_node(node_id)
        node.is_failed = False
        node.status = "healthy"
        self._failures.pop(node_id, None)

    def expire_failures(self, now: Optional[float] = None) -> list[str]:
        """Recover every node whose failure window has passed; returns their ids."""
        now = self._clock() if now is None else now
        expired = [nid for nid, until in self._failures.items() if until <= now]
        for nid in expired:
            self.clear_failure(nid)
        return expired

    # ------------------------------------------------------------------
    # Traffic and scheduling
    # ------------------------------------------------------------------

    def set_traffic(
        self,
        load: Optional[float] = None,
        pattern: Optional[str] = None,
        speed: Optional[float] = None,
        running: Optional[bool] = None,
    ) -> None:
        if load is not None:
            if load < 0:
                raise ValueError("Traffic load must be non-negative")
            self.traffic_load = load
        if pattern is not None:
            if pattern not in TRAFFIC_PATTERNS:
                raise ValueError(f"Unknown traffic pattern '{pattern}'")
            self.traffic_pattern = pattern
        if speed is not None:
            if speed <= 0:
                raise ValueError("Simulation speed must be positive")
            self.speed = speed
        if running is not None:
            self.running = running

    @property
    def tick_interval(self) -> float:
        """Seconds between ticks at the current speed."""
        return 1.0 / self.speed

    def should_tick(self, now: float) -> bool:
        if not self.running or not self.nodes:
            return False
        return self.last_tick_at is None or now - self.last_tick_at >= self.tick_interval

    def step(self, now: Optional[float] = None) -> Optional[SimulationResult]:
        """Scheduler entry point: tick if the interval has elapsed, otherwise skip."""
        now = self._clock() if now is None else now
        if not self.should_tick(now):
            return None
        self.expire_failures(now)
        return self.run_tick(now)

    def run_tick(self, now: Optional[float] = None) -> SimulationResult:
        """Run one tick unconditionally and write node state back."""
        now = self._clock() if now is None else now
        effective_load = modulate_traffic(self.traffic_load, self.traffic_pattern, now, self._rng)

        nodes = list(self.nodes.values())
        result = tick(nodes, list(self.edges.values()), effective_load, self.alerts, self._alert_ids)

        for node in nodes:
            update = result.node_updates.get(node.id)
            if update is None:
                continue
            node.current_load = update.current_load
            node.current_rps = update.current_rps
            node.error_rate = update.error_rate
            node.status = "failed" if node.is_failed else update.status
            node.is_bottleneck = update.is_bottleneck
            node.is_spof = update.is_spof

        self.tick_count += 1
        self.last_tick_at = now
        self.last_result = result
        self.history.push(self.tick_count, effective_load, result.metrics)
        self.add_alerts(result.alerts)
        return result

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    def add_alerts(self, alerts: list[SystemAlert]) -> None:
        """Append alerts not already present by message, keeping the newest ``alert_limit``."""
        existing = {a.message for a in self.alerts}
        for alert in alerts:
            if alert.message in existing:
                continue
            existing.add(alert.message)
            self.alerts.append(alert)
            logger.debug("Alert [%s] %s", alert.type, alert.message)
        del self.alerts[:-self.alert_limit]

    def dismiss_alert(self, alert_id: str) -> None:
        for alert in self.alerts:
            if alert.id == alert_id:
                alert.dismissed = True
                return
        raise KeyError(f"Alert '{alert_id}' not found")

    def record_feedback(self, action: str, component_kind: str) -> Optional[SystemAlert]:
        alert = feedback_for(action, component_kind, self._alert_ids)
        if alert is not None:
            self.add_alerts([alert])
        return alert

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def topology(self) -> TopologyAnalysis:
        return analyze_topology(list(self.nodes.values()), list(self.edges.values()))

    def metrics(self) -> MetricSnapshot:
        """Metrics at the configured (unmodulated) traffic load."""
        return compute_metrics(list(self.nodes.values()), list(self.edges.values()), self.traffic_load)

    def validate(self) -> ValidationReport:
        nodes = list(self.nodes.values())
        edges = list(self.edges.values())
        topology = analyze_topology(nodes, edges)
        metrics = compute_metrics(nodes, edges, self.traffic_load)
        return validate(
            nodes, edges, topology.spof_node_ids, metrics,
            self.traffic_load, self.traffic_pattern, self.active_scenario,
        )

    def advise(self) -> list[AdvisorMessage]:
        nodes = list(self.nodes.values())
        edges = list(self.edges.values())
        topology = analyze_topology(nodes, edges)
        return advise(nodes, edges, compute_metrics(nodes, edges, self.traffic_load), topology.spof_node_ids)

    # ------------------------------------------------------------------
    # Scenarios
    # ------------------------------------------------------------------

    def start_scenario(self, scenario_id: Optional[str], with_starters: bool = True) -> Optional[ScenarioDefinition]:
        """Activate a scenario (``None`` returns to freeform); optionally place its starter components."""
        if scenario_id is None:
            self.active_scenario = None
            return None

        scenario = get_scenario(scenario_id)
        if scenario is None:
            raise KeyError(f"Scenario '{scenario_id}' not found")

        self.active_scenario = scenario
        if with_starters:
            self.clear(keep_scenario=True)
            self.name = scenario.name
            placed = [self.add_node(kind) for kind in scenario.starter_kinds]
            for src, dst in scenario.starter_edges:
                self.add_edge(placed[src].id, placed[dst].id)
        return scenario

    def scenario_progress(self) -> Optional[ScenarioProgress]:
        if self.active_scenario is None:
            return None
        nodes = list(self.nodes.values())
        edges = list(self.edges.values())
        topology = analyze_topology(nodes, edges)
        return compute_scenario_progress(
            self.active_scenario,
            compute_metrics(nodes, edges, self.traffic_load),
            [n.component_kind for n in nodes],
            len(topology.spof_node_ids),
        )

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def clear(self, keep_scenario: bool = False) -> None:
        """Empty the graph and all simulation state."""
        self.nodes.clear()
        self.edges.clear()
        self.alerts.clear()
        self.history.clear()
        self._failures.clear()
        self.last_result = None
        self.tick_count = 0
        self.last_tick_at = None
        self.name = "Untitled"
        self.description = None
        if not keep_scenario:
            self.active_scenario = None
        self._reset_counters()

    def reset(self) -> None:
        """Restore the last loaded graph (or an empty one) and the default traffic settings."""
        template = copy.deepcopy(self._initial_template)
        self.traffic_load = self.default_traffic_load
        self.traffic_pattern = settings.default_traffic_pattern
        self.running = True
        if template is not None:
            self.load_graph(template)
        else:
            self.clear()
