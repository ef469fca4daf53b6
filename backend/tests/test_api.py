"""
Tests for the Roger HTTP and WebSocket surface.

Uses FastAPI's TestClient; sessions live in the global registry, which
the autouse fixture clears after every test.
"""

import pytest
from fastapi.testclient import TestClient

from main import app
from config import runtime_config
from routers.chat_orchestration import get_session_registry


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "roger"
        assert data["handlers"][0] == "identity"
        assert data["handlers"][-1] == "fallback"
        assert data["detectors"] == ["grief", "political", "preferences", "trauma"]


class TestSessionsApi:
    """REST session lifecycle."""

    def test_create_without_body(self, client):
        response = client.post("/api/sessions")
        assert response.status_code == 201
        session_id = response.json()["session_id"]
        assert get_session_registry().get(session_id)

    def test_create_with_id(self, client):
        response = client.post("/api/sessions", json={"session_id": "abc-123", "seed": 7})
        assert response.status_code == 201
        assert response.json() == {"session_id": "abc-123"}

    def test_duplicate_id(self, client):
        client.post("/api/sessions", json={"session_id": "dup"})
        assert client.post("/api/sessions", json={"session_id": "dup"}).status_code == 409

    def test_invalid_id(self, client):
        assert client.post("/api/sessions", json={"session_id": "bad id!"}).status_code == 400

    def test_get_session(self, client):
        client.post("/api/sessions", json={"session_id": "info"})
        data = client.get("/api/sessions/info").json()
        assert data["stage"] == "opening"
        assert data["message_count"] == 0
        assert data["shown_concerns"] == []

    def test_get_missing_session(self, client):
        response = client.get("/api/sessions/nope")
        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "NOT_FOUND_SESSION"

    def test_message_flow(self, client):
        client.post("/api/sessions", json={"session_id": "flow", "seed": 1})

        first = client.post("/api/sessions/flow/messages", json={"text": "hi"}).json()
        assert first["concern_tag"] is None
        assert first["alerts"] == []
        assert first["delay_ms"] > 0

        crisis = client.post("/api/sessions/flow/messages", json={"text": "I want to kill myself"}).json()
        assert crisis["concern_tag"] == "crisis"
        assert crisis["delay_ms"] == 0
        assert crisis["alerts"] == ["crisis"]

        again = client.post("/api/sessions/flow/messages", json={"text": "I want to kill myself"}).json()
        assert again["alerts"] == []

        info = client.get("/api/sessions/flow").json()
        assert info["message_count"] == 3
        assert info["introduction_made"] is True
        assert info["shown_concerns"] == ["crisis"]

    def test_message_to_missing_session(self, client):
        assert client.post("/api/sessions/nope/messages", json={"text": "hi"}).status_code == 404

    def test_empty_message(self, client):
        client.post("/api/sessions", json={"session_id": "empty"})
        response = client.post("/api/sessions/empty/messages", json={"text": "   "})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_MISSING_PARAM"

    def test_message_too_long(self, client):
        runtime_config.update(max_message_length=100)
        client.post("/api/sessions", json={"session_id": "long"})
        response = client.post("/api/sessions/long/messages", json={"text": "a" * 101})
        assert response.status_code == 400

    def test_delete(self, client):
        client.post("/api/sessions", json={"session_id": "gone"})
        response = client.delete("/api/sessions/gone")
        assert response.json() == {"success": True, "session_id": "gone"}
        assert client.delete("/api/sessions/gone").status_code == 404


class TestChatWebSocket:
    """Typing indicator, alerts and paced replies over /ws/chat."""

    def setup_method(self):
        runtime_config.update(typing_enabled=False)

    def test_session_announced(self, client):
        with client.websocket_connect("/ws/chat") as ws:
            msg = ws.receive_json()
            assert msg["type"] == "session"
            assert msg["session_id"].startswith("ws_")
            assert get_session_registry().count() == 1

    def test_reply_sequence(self, client):
        with client.websocket_connect("/ws/chat") as ws:
            ws.receive_json()
            ws.send_json({"type": "message", "text": "hi"})

            assert ws.receive_json() == {"type": "typing"}
            reply = ws.receive_json()
            assert reply["type"] == "reply"
            assert reply["text"]
            assert reply["concern_tag"] is None

    def test_crisis_alert_before_reply(self, client):
        with client.websocket_connect("/ws/chat") as ws:
            ws.receive_json()
            ws.send_json({"type": "message", "text": "I want to kill myself"})

            assert ws.receive_json() == {"type": "typing"}
            assert ws.receive_json() == {"type": "concern_alert", "tag": "crisis"}
            reply = ws.receive_json()
            assert reply["type"] == "reply"
            assert reply["concern_tag"] == "crisis"
            assert reply["delay_ms"] == 0

            ws.send_json({"type": "message", "text": "I want to kill myself"})
            assert ws.receive_json() == {"type": "typing"}
            assert ws.receive_json()["type"] == "reply"

    def test_message_too_long(self, client):
        runtime_config.update(max_message_length=100)
        with client.websocket_connect("/ws/chat") as ws:
            ws.receive_json()
            ws.send_json({"type": "message", "text": "a" * 101})
            msg = ws.receive_json()
            assert msg["type"] == "error"
            assert "too long" in msg["content"]

