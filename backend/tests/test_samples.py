"""Tests for the bundled sample graphs.

Each sample must validate as a GraphTemplate, load into a workspace and
exercise the part of the simulator it was written to demonstrate.
"""

import json
from pathlib import Path

import pytest

from archsim.engine.catalog import get_definition
from archsim.engine.workspace import SimulationWorkspace
from archsim.models.graph import GraphTemplate


SAMPLES_DIR = Path(__file__).resolve().parent.parent / "samples"
SAMPLE_PATHS = sorted(SAMPLES_DIR.glob("*.json"))


def _read(name: str) -> dict:
    with open(SAMPLES_DIR / f"{name}.json") as f:
        return json.load(f)


@pytest.fixture
def loaded():
    """Return a factory that loads a sample by name into a fresh workspace."""
    def _load(name: str) -> SimulationWorkspace:
        ws = SimulationWorkspace()
        ws.load_graph(_read(name))
        return ws
    return _load


# ---------------------------------------------------------------------------
# Schema / structure validation
# ---------------------------------------------------------------------------


class TestSampleStructure:
    def test_samples_present(self):
        assert [p.stem for p in SAMPLE_PATHS] == ["basic_web_app", "rag_chatbot", "scaled_web_app"]

    @pytest.mark.parametrize("path", SAMPLE_PATHS, ids=lambda p: p.stem)
    def test_pydantic_validation(self, path):
        template = GraphTemplate.model_validate(json.loads(path.read_text()))
        assert template.metadata.name
        assert template.metadata.description

    @pytest.mark.parametrize("path", SAMPLE_PATHS, ids=lambda p: p.stem)
    def test_kinds_known_and_edges_resolve(self, path):
        template = GraphTemplate.model_validate(json.loads(path.read_text()))
        node_ids = {n.id for n in template.graph_data.nodes}
        for node in template.graph_data.nodes:
            assert get_definition(node.component_kind) is not None, node.component_kind
        for edge in template.graph_data.edges:
            assert edge.source in node_ids
            assert edge.target in node_ids


# ---------------------------------------------------------------------------
# Behaviour
# ---------------------------------------------------------------------------


class TestSampleBehaviour:
    def test_basic_web_app_has_two_spofs(self, loaded):
        ws = loaded("basic_web_app")
        assert ws.topology().spof_node_ids == ["node-2", "node-3"]
        assert ws.scenario_progress().score == 50

    def test_scaled_web_app_has_no_spofs(self, loaded):
        ws = loaded("scaled_web_app")
        topology = ws.topology()
        assert "node-4" not in topology.spof_node_ids
        assert topology.has_caches
        assert ws.metrics().scalability_score > 65

    def test_rag_chatbot_is_ai_system(self, loaded):
        ws = loaded("rag_chatbot")
        assert ws.metrics().ai_metrics is not None
        assert any(e.is_ai_path for e in ws.edges.values())
        assert "ai" in [d.id for d in ws.validate().dimensions]
        assert ws.active_scenario.id == "rag-enterprise"
