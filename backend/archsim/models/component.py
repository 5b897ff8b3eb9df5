from pydantic import BaseModel, ConfigDict
from typing import Any, Literal

ComponentCategory = Literal[
    "clients",
    "loadbalancing",
    "compute",
    "storage",
    "messaging",
    "observability",
    "network",
    "ai",
]
ConsistencyModel = Literal["strong", "eventual", "causal"]
CAPAlignment = Literal["CP", "AP", "CA"]
TrafficPattern = Literal["steady", "spike", "sine-wave", "flash-sale"]
NodeStatus = Literal["healthy", "warning", "critical", "failed"]


class ComponentDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: str
    category: ComponentCategory
    name: str
    description: str = ""
    max_throughput: float
    base_latency: float
    failure_rate_at_capacity: float
    is_horizontally_scalable: bool
    availability_sla: float
    consistency_model: ConsistencyModel
    cap_alignment: CAPAlignment
    cost_per_instance_per_month: float
    default_config: dict[str, Any] = {}
