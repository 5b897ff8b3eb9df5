"""End-to-end verification of the simulator.

Walks a scenario from starter components to completion through the HTTP API,
and drives a loaded sample through ticks, failure injection and reset at the
engine level.
"""

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from archsim.api.routes import workspace
from archsim.engine.workspace import SimulationWorkspace
from archsim.main import app

BASE = "/api/v1/simulator"
SAMPLE_PATH = Path(__file__).resolve().parent.parent / "samples" / "basic_web_app.json"


@pytest.fixture
def sample_data():
    with open(SAMPLE_PATH) as f:
        return json.load(f)


@pytest.fixture
def loaded_workspace(sample_data):
    ws = SimulationWorkspace(clock=lambda: 0.0)
    ws.load_graph(sample_data)
    return ws


@pytest.fixture(autouse=True)
def _reset_global_workspace():
    """Ensure the global workspace singleton is clean before each test."""
    workspace.clear()
    workspace.set_traffic(load=1000, pattern="steady", speed=1.0, running=True)
    yield
    workspace.clear()


@pytest.fixture
def client():
    return TestClient(app)


# ---------------------------------------------------------------------------
# Engine-level pipeline: load → tick → fail → recover → reset
# ---------------------------------------------------------------------------


class TestEnginePipeline:
    def test_graph_matches_json(self, loaded_workspace, sample_data):
        assert len(loaded_workspace.nodes) == len(sample_data["graph_data"]["nodes"])
        assert len(loaded_workspace.edges) == len(sample_data["graph_data"]["edges"])

    def test_ticks_accumulate_history(self, loaded_workspace):
        for t in range(5):
            loaded_workspace.run_tick(now=float(t))
        assert loaded_workspace.tick_count == 5
        assert len(loaded_workspace.history) == 5
        assert len(loaded_workspace.history.series("throughput")) == 5

    def test_failure_cycle(self, loaded_workspace):
        loaded_workspace.inject_failure("node-3", duration=2, now=0)
        failed = loaded_workspace.step(now=0)
        assert failed.metrics.error_rate == 1.0
        assert loaded_workspace.nodes["node-3"].status == "failed"

        recovered = loaded_workspace.step(now=3)
        assert recovered.metrics.error_rate < 1.0
        assert loaded_workspace.nodes["node-3"].status != "failed"

    def test_reset_restores_initial_state(self, loaded_workspace, sample_data):
        loaded_workspace.add_node("redis-cache")
        loaded_workspace.update_node("node-2", {"replicas": 4})
        loaded_workspace.run_tick(now=0)

        loaded_workspace.reset()

        assert len(loaded_workspace.nodes) == len(sample_data["graph_data"]["nodes"])
        assert loaded_workspace.nodes["node-2"].config.replicas == 1
        assert loaded_workspace.nodes["node-2"].status == "healthy"
        assert loaded_workspace.history.get_history() == []

    def test_analysis_consistent_after_reset(self, loaded_workspace):
        before = loaded_workspace.validate()
        loaded_workspace.add_node("cdn")
        loaded_workspace.reset()
        after = loaded_workspace.validate()
        assert before.overall_score == after.overall_score
        assert before.context == after.context


# ---------------------------------------------------------------------------
# API walk-through: a scenario from starters to completion
# ---------------------------------------------------------------------------


class TestScenarioWalkthrough:
    def test_basic_web_app_to_completion(self, client):
        nodes = client.put(f"{BASE}/scenario", json={"scenario_id": "basic-web-app"}).json()["nodes"]
        assert [n["id"] for n in nodes] == ["node-1"]

        # single server, single database
        server = client.post(f"{BASE}/nodes", json={"component_kind": "web-server"}).json()["node"]["id"]
        db = client.post(f"{BASE}/nodes", json={"component_kind": "postgresql"}).json()["node"]["id"]
        direct = client.post(f"{BASE}/edges", json={"source": "node-1", "target": server}).json()["id"]
        client.post(f"{BASE}/edges", json={"source": server, "target": db})

        progress = client.get(f"{BASE}/scenario/progress").json()
        assert progress["score"] == 50
        assert progress["targets_met"]["spofs"] is False

        # scale out behind a load balancer at the target traffic
        client.put(f"{BASE}/traffic", json={"load": 5000})
        lb = client.post(f"{BASE}/nodes", json={"component_kind": "load-balancer"}).json()["node"]["id"]
        client.delete(f"{BASE}/edges/{direct}")
        client.post(f"{BASE}/edges", json={"source": "node-1", "target": lb})
        client.post(f"{BASE}/edges", json={"source": lb, "target": server})
        client.post(f"{BASE}/nodes/{lb}/replica")
        client.patch(f"{BASE}/nodes/{server}", json={"replicas": 5})
        client.patch(f"{BASE}/nodes/{db}", json={"replicas": 3})

        assert client.get(f"{BASE}/topology").json()["spof_node_ids"] == []
        metrics = client.get(f"{BASE}/metrics").json()
        assert metrics["throughput"] == 5000
        assert metrics["availability"] == 0.99999

        progress = client.get(f"{BASE}/scenario/progress").json()
        assert progress["score"] == 100
        assert progress["completed"] is True

        report = client.post(f"{BASE}/validate").json()
        assert report["context"]["mode"] == "scenario"
        rel_spof = next(
            c for d in report["dimensions"] for c in d["checks"] if c["id"] == "rel-spof"
        )
        assert rel_spof["outcome"] == "pass"

    def test_full_api_round_trip(self, client):
        resp = client.post(f"{BASE}/load", params={"sample": "scaled_web_app"})
        assert resp.status_code == 200

        for _ in range(3):
            assert client.post(f"{BASE}/tick").json()["ticked"] is True
        assert len(client.get(f"{BASE}/metrics/history", params={"count": 2}).json()) == 2

        client.post(f"{BASE}/nodes/node-4/fail", json={"duration_seconds": 30})
        result = client.post(f"{BASE}/tick").json()["result"]
        assert result["node_updates"]["node-4"]["status"] == "failed"

        data = client.post(f"{BASE}/reset").json()
        assert len(data["nodes"]) == 8
        assert all(n["status"] == "healthy" for n in data["nodes"])
        assert client.get(f"{BASE}/metrics/history").json() == []
