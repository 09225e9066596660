"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from tracelab.api import create_fastapi_app
from tracelab.app import Application


@pytest.fixture
def client():
    """TestClient over a fresh Application."""
    with TestClient(create_fastapi_app(Application(auto_advance_ms=10))) as c:
        yield c


def open_session(client, scenario_id="recursive_resolution", **extra) -> dict:
    response = client.post("/api/sessions", json={"scenario_id": scenario_id, **extra})
    assert response.status_code == 200
    return response.json()


class TestScenarioRoutes:
    """Tests for scenario listing."""

    def test_health(self, client):
        """Test the health endpoint."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_list_scenarios(self, client):
        """Test the library listing."""
        response = client.get("/api/scenarios")

        assert response.status_code == 200
        ids = [s["id"] for s in response.json()]
        assert "cache_poisoning" in ids
        assert len(ids) == 16


class TestSessionRoutes:
    """Tests for session routes."""

    def test_open_session(self, client):
        """Test opening a library scenario returns the first snapshot."""
        body = open_session(client, domain="example.org")

        assert body["scenario_id"] == "recursive_resolution"
        assert body["snapshot"]["playback_state"]["current_index"] == 0

    def test_open_unknown_scenario(self, client):
        """Test unknown scenarios are 404."""
        response = client.post("/api/sessions", json={"scenario_id": "nope"})

        assert response.status_code == 404

    def test_load_document(self, client, race_document):
        """Test a raw document opens a session."""
        response = client.post("/api/sessions/load", json={"document": race_document})

        assert response.status_code == 200
        assert response.json()["scenario_id"] == "four_flow_race"

    def test_load_with_wrongly_typed_config(self, client, race_document):
        """Test a non-string config value degrades the text, not the diagnostic."""
        response = client.post(
            "/api/sessions/load",
            json={"document": race_document, "config": {"domain": 5}},
        )

        assert response.status_code == 200
        diagnostic = response.json()["snapshot"]["diagnostic"]
        assert "domain" in diagnostic["degraded_fields"]
        kinds = [issue["kind"] for issue in diagnostic["issues"]]
        assert "diagnostic_unavailable" not in kinds

    def test_load_malformed_document(self, client, race_document):
        """Test structural errors are 422 with their kind."""
        race_document["steps"][1]["flows"][0]["targetActorId"] = "ghost"

        response = client.post("/api/sessions/load", json={"document": race_document})

        assert response.status_code == 422
        assert response.json()["detail"]["kind"] == "unknown_actor"

    def test_snapshot_and_delete(self, client):
        """Test reading and closing a session."""
        session_id = open_session(client)["session_id"]

        assert client.get(f"/api/sessions/{session_id}/snapshot").status_code == 200
        assert client.delete(f"/api/sessions/{session_id}").status_code == 200
        assert client.get(f"/api/sessions/{session_id}/snapshot").status_code == 404
        assert client.delete(f"/api/sessions/{session_id}").status_code == 404


class TestPlaybackRoutes:
    """Tests for playback routes."""

    def test_step_and_seek(self, client):
        """Test navigation actions."""
        session_id = open_session(client)["session_id"]

        body = client.post(f"/api/sessions/{session_id}/playback/step_forward").json()
        assert body["snapshot"]["playback_state"]["current_index"] == 1

        body = client.post(f"/api/sessions/{session_id}/seek", json={"index": 99}).json()
        state = body["snapshot"]["playback_state"]
        assert state["current_index"] == state["length"] - 1

        body = client.post(f"/api/sessions/{session_id}/playback/first").json()
        assert body["snapshot"]["playback_state"]["current_index"] == 0

    def test_play_and_pause(self, client):
        """Test play and pause toggle the playing flag."""
        session_id = open_session(client)["session_id"]

        body = client.post(f"/api/sessions/{session_id}/playback/play").json()
        assert body["snapshot"]["playback_state"]["is_playing"] is True

        body = client.post(f"/api/sessions/{session_id}/playback/pause").json()
        assert body["snapshot"]["playback_state"]["is_playing"] is False

    def test_unknown_action(self, client):
        """Test invalid actions are rejected by validation."""
        session_id = open_session(client)["session_id"]

        response = client.post(f"/api/sessions/{session_id}/playback/rewind")

        assert response.status_code == 422

    def test_missing_session(self, client):
        """Test playback on a missing session is 404."""
        response = client.post("/api/sessions/missing/playback/play")

        assert response.status_code == 404
