from pydantic import BaseModel
from typing import Literal, Optional


class ScenarioTargets(BaseModel):
    min_availability: Optional[float] = None
    max_latency_p95: Optional[float] = None
    min_throughput: Optional[float] = None
    max_cost: Optional[float] = None
    max_spofs: Optional[int] = None
    required_components: list[str] = []


class ScenarioDefinition(BaseModel):
    id: str
    name: str
    description: str
    difficulty: Literal["beginner", "intermediate", "advanced"]
    targets: ScenarioTargets
    # component kinds placed when the scenario starts; edges index into that list
    starter_kinds: list[str] = []
    starter_edges: list[tuple[int, int]] = []
    hints: list[str] = []
    completion_message: str = ""
    real_world_architecture: str = ""


class ScenarioProgress(BaseModel):
    scenario_id: str
    score: int
    completed: bool
    targets_met: dict[str, bool] = {}
