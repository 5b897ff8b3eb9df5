from .component import ComponentDefinition, ComponentCategory, TrafficPattern, NodeStatus
from .graph import NodeConfig, SystemNode, SystemEdge, GraphData, Metadata, GraphTemplate
from .metrics import AIMetrics, MetricSnapshot, SystemAlert, NodeUpdate, TopologyAnalysis, SimulationResult
from .scenario import ScenarioTargets, ScenarioDefinition, ScenarioProgress
from .validation import (
    ContextThresholds,
    ScaleTierSignals,
    ValidationContext,
    ContextualVerdict,
    ValidationCheck,
    ValidationDimension,
    ValidationReport,
    AdvisorMessage,
)
from .api import (
    AddNodeRequest,
    UpdateNodeRequest,
    AddEdgeRequest,
    FailureRequest,
    TrafficRequest,
    ScenarioRequest,
    NodeResponse,
    ReplicaResponse,
    GraphResponse,
    TrafficState,
    TickResponse,
)
