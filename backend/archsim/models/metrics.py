from pydantic import BaseModel
from typing import Literal, Optional

from .component import NodeStatus


class AIMetrics(BaseModel):
    token_throughput: float = 0.0
    ttft_p95: float = 0.0
    context_utilization: float = 0.0
    gpu_memory_pressure: float = 0.0
    hallucination_risk: float = 0.0
    rag_retrieval_accuracy: float = 0.0
    ai_cost_per_1k_requests: float = 0.0
    agent_steps_avg: float = 0.0


class MetricSnapshot(BaseModel):
    throughput: float = 0.0
    latency_p50: float = 0.0
    latency_p95: float = 0.0
    latency_p99: float = 0.0
    availability: float = 0.0
    error_rate: float = 0.0
    network_hops: int = 0
    consistency_model: str = "N/A"
    cache_hit_rate: Optional[float] = None
    db_read_write_ratio: Optional[float] = None
    scalability_score: float = 0.0
    monthly_cost: float = 0.0
    queue_depth: Optional[float] = None
    cap_state: str = "N/A"
    ai_metrics: Optional[AIMetrics] = None


class SystemAlert(BaseModel):
    id: str
    type: Literal["info", "warning", "error", "success"]
    message: str
    node_id: Optional[str] = None
    dismissed: bool = False


class NodeUpdate(BaseModel):
    current_load: float
    current_rps: float
    error_rate: float
    status: NodeStatus
    is_bottleneck: bool
    is_spof: bool


class TopologyAnalysis(BaseModel):
    critical_path: list[str] = []
    critical_path_latency: float = 0.0
    spof_node_ids: list[str] = []
    bottleneck_node_id: Optional[str] = None
    network_hops: int = 0
    redundancy_groups: dict[str, list[str]] = {}
    has_clients: bool = False
    has_storage: bool = False
    has_caches: bool = False
    has_queues: bool = False


class SimulationResult(BaseModel):
    metrics: MetricSnapshot
    node_updates: dict[str, NodeUpdate] = {}
    alerts: list[SystemAlert] = []
    bottleneck_node_ids: list[str] = []
    spof_node_ids: list[str] = []
