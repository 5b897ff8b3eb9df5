from pydantic import BaseModel, Field
from typing import Any, Optional

from .graph import SystemEdge, SystemNode
from .metrics import SimulationResult, SystemAlert
from .component import TrafficPattern


class AddNodeRequest(BaseModel):
    component_kind: str
    label: Optional[str] = None
    config: dict[str, Any] = {}


class UpdateNodeRequest(BaseModel):
    label: Optional[str] = None
    replicas: Optional[int] = Field(default=None, ge=1)
    region: Optional[str] = None
    extra: dict[str, Any] = {}

    def changes(self) -> dict[str, Any]:
        """Only the fields the caller actually set, with ``extra`` flattened in."""
        values = self.model_dump(exclude_unset=True, exclude={"extra"})
        values.update(self.extra)
        return values


class AddEdgeRequest(BaseModel):
    source: str
    target: str


class FailureRequest(BaseModel):
    duration_seconds: Optional[float] = Field(default=None, gt=0)


class TrafficRequest(BaseModel):
    load: Optional[float] = Field(default=None, ge=0)
    pattern: Optional[TrafficPattern] = None
    speed: Optional[float] = Field(default=None, gt=0)
    running: Optional[bool] = None


class ScenarioRequest(BaseModel):
    scenario_id: Optional[str] = None
    with_starters: bool = True


class NodeResponse(BaseModel):
    node: SystemNode
    feedback: Optional[SystemAlert] = None


class ReplicaResponse(BaseModel):
    node: SystemNode
    changed: bool


class GraphResponse(BaseModel):
    name: str
    nodes: list[SystemNode] = []
    edges: list[SystemEdge] = []


class TrafficState(BaseModel):
    load: float
    pattern: str
    speed: float
    running: bool
    tick_interval_seconds: float


class TickResponse(BaseModel):
    ticked: bool
    tick: int
    result: Optional[SimulationResult] = None
