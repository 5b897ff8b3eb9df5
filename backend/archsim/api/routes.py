"""REST API routes for the simulator: graph editing, ticks, analysis, scenarios, samples."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, File, HTTPException, UploadFile
from pydantic import ValidationError

from archsim.engine.catalog import COMPONENT_DEFINITIONS, get_components_by_category
from archsim.engine.scenarios import SCENARIOS
from archsim.engine.workspace import SimulationWorkspace
from archsim.models.api import (
    AddEdgeRequest,
    AddNodeRequest,
    FailureRequest,
    GraphResponse,
    NodeResponse,
    ReplicaResponse,
    ScenarioRequest,
    TickResponse,
    TrafficRequest,
    TrafficState,
    UpdateNodeRequest,
)
from archsim.models.component import ComponentDefinition
from archsim.models.graph import GraphTemplate, SystemEdge
from archsim.models.metrics import MetricSnapshot, SystemAlert, TopologyAnalysis
from archsim.models.scenario import ScenarioDefinition, ScenarioProgress
from archsim.models.validation import AdvisorMessage, ValidationReport

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/simulator")

# --- Module-level singletons ---
workspace = SimulationWorkspace()

# --- Samples directory (resolved relative to the backend root) ---
SAMPLES_DIR = Path(__file__).resolve().parent.parent.parent / "samples"


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _load_sample_data(sample_name: str) -> dict[str, Any]:
    """Load a built-in sample JSON file by name (without .json extension)."""
    sample_path = SAMPLES_DIR / f"{sample_name}.json"
    if not sample_path.is_file():
        raise HTTPException(
            status_code=400,
            detail=f"Sample '{sample_name}' not found. Available samples: "
                   f"{[p.stem for p in sorted(SAMPLES_DIR.glob('*.json'))]}",
        )
    try:
        return json.loads(sample_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise HTTPException(
            status_code=400, detail=f"Sample file '{sample_name}.json' contains invalid JSON: {exc}"
        ) from exc


def _client_error(exc: Exception) -> HTTPException:
    # KeyError wraps its message in quotes when str()-ed
    detail = exc.args[0] if isinstance(exc, KeyError) and exc.args else str(exc)
    return HTTPException(status_code=400, detail=detail)


def _graph_response() -> GraphResponse:
    return GraphResponse(
        name=workspace.name,
        nodes=list(workspace.nodes.values()),
        edges=list(workspace.edges.values()),
    )


def _traffic_state() -> TrafficState:
    return TrafficState(
        load=workspace.traffic_load,
        pattern=workspace.traffic_pattern,
        speed=workspace.speed,
        running=workspace.running,
        tick_interval_seconds=workspace.tick_interval,
    )


# ------------------------------------------------------------------
# Catalog and samples
# ------------------------------------------------------------------

@router.get("/catalog", response_model=list[ComponentDefinition])
async def list_components(category: str | None = None) -> list[ComponentDefinition]:
    """Return the component catalog, optionally filtered by category."""
    if category is None:
        return COMPONENT_DEFINITIONS
    return get_components_by_category(category)


@router.get("/samples")
async def list_samples() -> list[dict[str, str]]:
    """Return the built-in sample graphs from the samples/ directory."""
    if not SAMPLES_DIR.is_dir():
        return []
    results = []
    for path in sorted(SAMPLES_DIR.glob("*.json")):
        description = ""
        try:
            content = json.loads(path.read_text(encoding="utf-8"))
            description = content.get("metadata", {}).get("description") or ""
        except json.JSONDecodeError:
            logger.warning("Skipping description of malformed sample %s", path.name)
        results.append({"name": path.stem, "description": description})
    return results


# ------------------------------------------------------------------
# POST /load
# ------------------------------------------------------------------

@router.post("/load", response_model=GraphResponse)
async def load_graph(
    file: UploadFile | None = File(None),
    sample: str | None = None,
) -> GraphResponse:
    """Load a graph from an uploaded JSON file or a built-in sample name.

    Accepts either:
    - A multipart/form-data file upload (``file``), or
    - A query parameter ``sample`` naming a built-in graph (e.g. ``basic_web_app``).
    """
    if file is not None:
        try:
            raw = await file.read()
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid JSON: {exc}") from exc
    elif sample is not None:
        data = _load_sample_data(sample)
    else:
        raise HTTPException(status_code=400, detail="Provide either a file upload or a 'sample' query parameter.")

    try:
        workspace.load_graph(data)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False)) from exc
    except ValueError as exc:
        raise _client_error(exc) from exc

    return _graph_response()


@router.get("/graph", response_model=GraphResponse)
async def get_graph() -> GraphResponse:
    return _graph_response()


@router.get("/export", response_model=GraphTemplate)
async def export_graph() -> GraphTemplate:
    """Return the live graph as a template that POST /load accepts."""
    return workspace.to_template()


# ------------------------------------------------------------------
# Nodes
# ------------------------------------------------------------------

@router.post("/nodes", response_model=NodeResponse)
async def add_node(request: AddNodeRequest) -> NodeResponse:
    try:
        node = workspace.add_node(request.component_kind, label=request.label, config=request.config)
    except (ValueError, ValidationError) as exc:
        raise _client_error(exc) from exc
    feedback = workspace.record_feedback("add", request.component_kind)
    return NodeResponse(node=node, feedback=feedback)


@router.patch("/nodes/{node_id}", response_model=NodeResponse)
async def update_node(node_id: str, request: UpdateNodeRequest) -> NodeResponse:
    try:
        node = workspace.update_node(node_id, request.changes())
    except (KeyError, ValueError, ValidationError) as exc:
        raise _client_error(exc) from exc
    return NodeResponse(node=node)


@router.delete("/nodes/{node_id}", response_model=GraphResponse)
async def remove_node(node_id: str) -> GraphResponse:
    try:
        workspace.remove_node(node_id)
    except KeyError as exc:
        raise _client_error(exc) from exc
    return _graph_response()


@router.post("/nodes/{node_id}/replica", response_model=ReplicaResponse)
async def add_replica(node_id: str) -> ReplicaResponse:
    """Add one replica; ``changed`` is false for kinds that do not scale horizontally."""
    try:
        changed = workspace.add_replica(node_id)
    except KeyError as exc:
        raise _client_error(exc) from exc
    return ReplicaResponse(node=workspace.nodes[node_id], changed=changed)


@router.post("/nodes/{node_id}/duplicate", response_model=NodeResponse)
async def duplicate_node(node_id: str) -> NodeResponse:
    try:
        node = workspace.duplicate_node(node_id)
    except KeyError as exc:
        raise _client_error(exc) from exc
    return NodeResponse(node=node)


@router.post("/nodes/{node_id}/fail")
async def inject_failure(node_id: str, request: FailureRequest | None = None) -> dict[str, Any]:
    duration = request.duration_seconds if request is not None else None
    try:
        expires_at = workspace.inject_failure(node_id, duration)
    except KeyError as exc:
        raise _client_error(exc) from exc
    return {"node_id": node_id, "failed": True, "expires_at": expires_at}


@router.delete("/nodes/{node_id}/fail")
async def clear_failure(node_id: str) -> dict[str, Any]:
    try:
        workspace.clear_failure(node_id)
    except KeyError as exc:
        raise _client_error(exc) from exc
    return {"node_id": node_id, "failed": False}


# ------------------------------------------------------------------
# Edges
# ------------------------------------------------------------------

@router.post("/edges", response_model=SystemEdge)
async def add_edge(request: AddEdgeRequest) -> SystemEdge:
    try:
        return workspace.add_edge(request.source, request.target)
    except (KeyError, ValueError) as exc:
        raise _client_error(exc) from exc


@router.delete("/edges/{edge_id}", response_model=GraphResponse)
async def remove_edge(edge_id: str) -> GraphResponse:
    try:
        workspace.remove_edge(edge_id)
    except KeyError as exc:
        raise _client_error(exc) from exc
    return _graph_response()


# ------------------------------------------------------------------
# Traffic and ticks
# ------------------------------------------------------------------

@router.get("/traffic", response_model=TrafficState)
async def get_traffic() -> TrafficState:
    return _traffic_state()


@router.put("/traffic", response_model=TrafficState)
async def set_traffic(request: TrafficRequest) -> TrafficState:
    try:
        workspace.set_traffic(request.load, request.pattern, request.speed, request.running)
    except ValueError as exc:
        raise _client_error(exc) from exc
    return _traffic_state()


@router.post("/tick", response_model=TickResponse)
async def run_tick(force: bool = True) -> TickResponse:
    """Advance the simulation. With ``force=false`` the speed interval gate applies."""
    if not workspace.nodes:
        raise HTTPException(status_code=400, detail="The graph is empty. Add components or call /load first.")
    if force:
        workspace.expire_failures()
        result = workspace.run_tick()
    else:
        result = workspace.step()
    return TickResponse(ticked=result is not None, tick=workspace.tick_count, result=result)


# ------------------------------------------------------------------
# Analysis
# ------------------------------------------------------------------

@router.get("/topology", response_model=TopologyAnalysis)
async def get_topology() -> TopologyAnalysis:
    return workspace.topology()


@router.get("/metrics", response_model=MetricSnapshot)
async def get_metrics() -> MetricSnapshot:
    return workspace.metrics()


@router.get("/metrics/history")
async def get_metric_history(count: int | None = None) -> list[dict[str, Any]]:
    return workspace.history.get_history(count)


@router.get("/metrics/history/{field}")
async def get_metric_series(field: str) -> list[Any]:
    """Sparkline values of one metric across the recorded ticks."""
    try:
        return workspace.history.series(field)
    except KeyError as exc:
        raise _client_error(exc) from exc


@router.get("/alerts", response_model=list[SystemAlert])
async def get_alerts(include_dismissed: bool = False) -> list[SystemAlert]:
    return [a for a in workspace.alerts if include_dismissed or not a.dismissed]


@router.post("/alerts/{alert_id}/dismiss", response_model=SystemAlert)
async def dismiss_alert(alert_id: str) -> SystemAlert:
    try:
        workspace.dismiss_alert(alert_id)
    except KeyError as exc:
        raise _client_error(exc) from exc
    return next(a for a in workspace.alerts if a.id == alert_id)


@router.post("/validate", response_model=ValidationReport)
async def validate_architecture() -> ValidationReport:
    report = workspace.validate()
    logger.info(
        "Validation: %s (%d) at tier %s", report.grade, report.overall_score, report.context.scale_tier
    )
    return report


@router.get("/advisor", response_model=list[AdvisorMessage])
async def get_advice() -> list[AdvisorMessage]:
    return workspace.advise()


# ------------------------------------------------------------------
# Scenarios
# ------------------------------------------------------------------

@router.get("/scenarios", response_model=list[ScenarioDefinition])
async def list_scenarios() -> list[ScenarioDefinition]:
    return SCENARIOS


@router.put("/scenario", response_model=GraphResponse)
async def set_scenario(request: ScenarioRequest) -> GraphResponse:
    """Activate a scenario (``scenario_id: null`` returns to freeform mode)."""
    try:
        workspace.start_scenario(request.scenario_id, with_starters=request.with_starters)
    except KeyError as exc:
        raise _client_error(exc) from exc
    return _graph_response()


@router.get("/scenario/progress", response_model=ScenarioProgress)
async def get_scenario_progress() -> ScenarioProgress:
    progress = workspace.scenario_progress()
    if progress is None:
        raise HTTPException(status_code=400, detail="No active scenario. Call PUT /scenario first.")
    return progress


# ------------------------------------------------------------------
# POST /reset
# ------------------------------------------------------------------

@router.post("/reset", response_model=GraphResponse)
async def reset_workspace(clear: bool = False) -> GraphResponse:
    """Restore the last loaded graph, or empty the workspace with ``clear=true``."""
    if clear:
        workspace.clear()
    else:
        workspace.reset()
    return _graph_response()
