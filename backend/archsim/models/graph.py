from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from .component import NodeStatus


class NodeConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    label: str
    replicas: int = Field(default=1, ge=1)
    region: str = "us-east-1"


class SystemNode(BaseModel):
    id: str
    component_kind: str
    config: NodeConfig
    status: NodeStatus = "healthy"
    current_load: float = 0.0
    current_rps: float = 0.0
    error_rate: float = 0.0
    is_spof: bool = False
    is_bottleneck: bool = False
    is_failed: bool = False


class SystemEdge(BaseModel):
    id: str
    source: str
    target: str
    is_ai_path: bool = False


class GraphData(BaseModel):
    nodes: list[SystemNode] = []
    edges: list[SystemEdge] = []


class Metadata(BaseModel):
    name: str
    description: Optional[str] = None
    traffic_load: Optional[float] = None
    scenario_id: Optional[str] = None


class GraphTemplate(BaseModel):
    """A saved graph: metadata plus nodes/edges."""

    metadata: Metadata
    graph_data: GraphData
