"""Tests for the FastAPI server application."""

from __future__ import annotations

import json
import time

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from hyperpaint.config import StudioSettings
from hyperpaint.model import Point4D
from hyperpaint.server.app import StudioState, app, get_studio_state


@pytest.fixture
def client() -> TestClient:
    """Create a test client with a fresh global studio."""
    get_studio_state().reset()
    return TestClient(app)


@pytest.fixture
def batched_state() -> StudioState:
    """A studio state that batches passes of 10 or more nodes, 4 per tick."""
    settings = StudioSettings(
        _env_file=None,
        max_instances=400,
        batch_threshold=10,
        batch_size=4,
        frame_rate=200,
    )
    return StudioState(settings)


class TestStudioState:
    """Tests for StudioState."""

    def test_tick_advances_batched_pass(self, batched_state: StudioState) -> None:
        def add_nodes(studio):
            for i in range(12):
                studio.store.add_node(Point4D(i, 0, 0, 0), "ai", recompute=False)
            return studio.scheduler.request_pass()

        assert batched_state.run(add_nodes) is False
        assert batched_state.tick() is False
        assert batched_state.tick() is True
        assert batched_state.frame == 2
        assert batched_state.run(lambda s: s.scheduler.active_instances) == 12

    def test_reset(self, batched_state: StudioState) -> None:
        batched_state.run(lambda s: s.load_sample())
        batched_state.tick()
        batched_state.reset()
        assert batched_state.frame == 0
        assert batched_state.run(lambda s: len(s.store.nodes)) == 0

    def test_frame_thread(self, batched_state: StudioState) -> None:
        batched_state.start()
        try:
            time.sleep(0.1)
        finally:
            batched_state.stop()
        frame = batched_state.frame
        assert frame > 0
        time.sleep(0.05)
        assert batched_state.frame == frame


class TestRESTEndpoints:
    """Tests for REST API endpoints."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "healthy"}

    def test_get_state(self, client: TestClient) -> None:
        response = client.get("/api/state")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["projection_mode"] == "slice"
        assert data["w_slice"] == 0.0
        assert data["stats"]["total_nodes"] == 0
        assert data["pass_pending"] is False
        assert data["capacity"] == get_studio_state().settings.max_instances // 4

    def test_get_params(self, client: TestClient) -> None:
        data = client.get("/api/params").json()
        assert [p["key"] for p in data] == ["d", "a", "b", "R", "c"]
        assert all(p["level"] == "safe" for p in data)

    def test_set_param_clamps(self, client: TestClient) -> None:
        response = client.put("/api/params/d", json={"value": 100})
        assert response.status_code == status.HTTP_200_OK
        d = next(p for p in response.json() if p["key"] == "d")
        assert d["value"] == 24.0

    def test_set_unknown_param(self, client: TestClient) -> None:
        response = client.put("/api/params/zoom", json={"value": 1})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_presets(self, client: TestClient) -> None:
        data = client.get("/api/presets").json()
        assert {p["key"] for p in data} >= {"flat-slice", "w-parallax"}

        response = client.post("/api/presets/w-parallax")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["projection_mode"] == "orthogonal"

        assert client.post("/api/presets/fisheye").status_code == status.HTTP_404_NOT_FOUND

    def test_extreme_preset_is_not_clamped(self, client: TestClient) -> None:
        client.post("/api/presets/extreme-perspective")
        d = next(p for p in client.get("/api/params").json() if p["key"] == "d")
        assert d["value"] == 1.5
        assert d["level"] == "safe"

    def test_set_mode(self, client: TestClient) -> None:
        data = client.post("/api/projection/mode", json={"mode": "perspective"}).json()
        assert data["projection_mode"] == "perspective"
        data = client.post("/api/projection/mode", json={"mode": "warp"}).json()
        assert data["projection_mode"] == "slice"

    def test_set_slice(self, client: TestClient) -> None:
        client.post("/api/space/sample")
        data = client.post("/api/projection/slice", json={"w": 10.0}).json()
        assert data["w_slice"] == 10.0
        assert data["stats"]["active_nodes"] == 0
        assert sum(data["instance_counts"].values()) == 0

    def test_add_node(self, client: TestClient) -> None:
        response = client.post(
            "/api/nodes",
            json={"x": 1, "y": 2, "z": 3, "w": 0.5, "category": "kernel"},
        )
        assert response.status_code == status.HTTP_200_OK
        node = response.json()
        assert node["id"] == "node-1"
        assert node["category"] == "kernel"
        assert node["properties"]["intensity"] == 1.0

        instances = client.get("/api/instances/kernel").json()
        assert instances["count"] == 1
        assert instances["transforms"][0]["x"] == 1.0

    def test_add_node_non_numeric_properties(self, client: TestClient) -> None:
        response = client.post(
            "/api/nodes",
            json={"category": "ai", "properties": {"kernelCoupling": "x", "intensity": "y"}},
        )
        assert response.status_code == status.HTTP_200_OK

        state = client.get("/api/state").json()
        assert state["stats"]["total_nodes"] == 1
        assert state["stats"]["average_kernel_coupling"] == 0.0

        data = client.post("/api/projection/slice", json={"w": 1.0}).json()
        assert data["stats"]["active_nodes"] == 1
        assert client.post("/api/nodes", json={"category": "ai"}).status_code == 200

    def test_add_node_bad_category(self, client: TestClient) -> None:
        response = client.post("/api/nodes", json={"category": "alien"})
        assert response.status_code == 422

    def test_unknown_instance_category(self, client: TestClient) -> None:
        assert client.get("/api/instances/alien").status_code == status.HTTP_404_NOT_FOUND

    def test_paint_gesture(self, client: TestClient) -> None:
        begin = client.post("/api/paint/begin", json={"x": 0, "y": 0, "z": 0}).json()
        assert begin["placed"] == 1

        step = client.post("/api/paint/continue", json={"x": 0.5, "y": 0, "z": 0}).json()
        assert step["stroke_id"] == begin["stroke_id"]
        assert step["placed"] > 0
        assert step["points"] == 2

        end = client.post("/api/paint/end").json()
        assert end["stroke_id"] == begin["stroke_id"]

        stats = client.get("/api/state").json()["stats"]
        assert stats["stroke_count"] == 1
        assert stats["total_nodes"] == 1 + step["placed"]

    def test_paint_without_gesture(self, client: TestClient) -> None:
        assert client.post("/api/paint/end").json()["stroke_id"] is None
        data = client.post("/api/paint/continue", json={"x": 1, "y": 1, "z": 1}).json()
        assert data["placed"] == 0

    def test_sample_and_clear(self, client: TestClient) -> None:
        response = client.post("/api/space/sample")
        assert response.json()["success"] is True
        assert client.get("/api/state").json()["stats"]["total_nodes"] == 15

        client.post("/api/space/clear")
        assert client.get("/api/state").json()["stats"]["total_nodes"] == 0


class TestSessionEndpoints:
    """Tests for session import and export endpoints."""

    def test_export_import_round_trip(self, client: TestClient) -> None:
        client.post("/api/space/sample")
        doc = client.get("/api/session/export").json()
        assert doc["schema"] == "4d-session/v1"

        client.post("/api/space/clear")
        response = client.post("/api/session/import", json=doc)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["nodes_imported"] == 15
        assert client.get("/api/state").json()["stats"]["total_nodes"] == 15

    def test_import_rejects_non_object(self, client: TestClient) -> None:
        response = client.post("/api/session/import", json=[1, 2, 3])
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_import_rejects_json_string_body(self, client: TestClient) -> None:
        client.post("/api/space/sample")
        doc = client.get("/api/session/export").json()
        response = client.post("/api/session/import", json=json.dumps(doc))
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "got str" in response.json()["detail"]
        assert client.get("/api/state").json()["stats"]["total_nodes"] == 15


class TestWebSocket:
    """Tests for the instance stream."""

    def test_streams_instances(self, client: TestClient) -> None:
        client.post("/api/space/sample")
        with client.websocket_connect("/ws/instances") as websocket:
            data = websocket.receive_json()
        assert data["mode"] == "slice"
        assert set(data["instances"]) == {"human", "ai", "hybrid", "kernel"}
        assert len(data["instances"]["ai"]) == 5
