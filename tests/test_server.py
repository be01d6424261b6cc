"""
Tests for the HTTP/WebSocket ingress.
"""
import json

import pytest
from fastapi.testclient import TestClient

from vintageshock.bridge import event_message
from vintageshock.config import ShockConfig
from vintageshock.engine import ShockEngine
from vintageshock.server import create_app

from conftest import make_settings


@pytest.fixture
def client(dispatcher):
    engine = ShockEngine(settings=make_settings(), dispatcher=dispatcher)
    with TestClient(create_app(engine)) as c:
        yield c


def test_lifespan_starts_and_stops_engine(dispatcher):
    engine = ShockEngine(settings=make_settings(), dispatcher=dispatcher)
    with TestClient(create_app(engine)):
        assert dispatcher.started
    assert dispatcher.stopped


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "service": "vintageshock"}


def test_damage_with_cooldown(client, dispatcher):
    body = {"damage": 5, "current_health": 15, "timestamp": 0}
    assert client.post("/events/damage", json=body).json() == {
        "fired": True, "reason": "damage", "intensity": 30, "duration_ms": 1000,
    }
    body["timestamp"] = 200
    assert client.post("/events/damage", json=body).json() == {"fired": False}
    body["timestamp"] = 600
    assert client.post("/events/damage", json=body).json()["fired"] is True
    assert len(dispatcher.commands) == 2


def test_death(client):
    result = client.post("/events/damage", json={"damage": 50, "current_health": 10}).json()
    assert result["reason"] == "death"


def test_hurt_other(client):
    result = client.post("/events/hurt-other", json={"damage": 3}).json()
    assert result["reason"] == "hurt_other"


def test_damage_validation(client):
    assert client.post("/events/damage", json={"current_health": 10}).status_code == 422


def test_status_hides_token(client):
    data = client.get("/status").json()
    assert "api-token" not in data["settings"]
    assert data["configured"] is True
    assert data["decay_active"] is False
    assert "Status" in data["text"]


def test_test_shock(client, dispatcher):
    response = client.post("/test")
    assert response.status_code == 200
    assert dispatcher.commands[0].reason == "test"


def test_test_shock_unconfigured(dispatcher):
    engine = ShockEngine(settings=make_settings(device_id=""), dispatcher=dispatcher)
    with TestClient(create_app(engine)) as c:
        response = c.post("/test")
    assert response.status_code == 409
    assert "not configured" in response.json()["detail"]


def test_reload(tmp_path, dispatcher):
    path = tmp_path / "vintageshock.json"
    path.write_text(json.dumps({"intensity": 77}))
    engine = ShockEngine(config=ShockConfig(str(path)), dispatcher=dispatcher)
    with TestClient(create_app(engine)) as c:
        data = c.post("/reload").json()
    assert data["settings"]["intensity"] == 77
    assert engine.settings.intensity == 77


def test_mod_websocket(client, dispatcher):
    with client.websocket_connect("/mod") as ws:
        ws.send_text(event_message("player_damaged", {"damage": 2, "current_health": 18}))
        reply = json.loads(ws.receive_text())
    assert reply["type"] == "event_ack"
    assert reply["data"]["fired"] is True
    assert len(dispatcher.commands) == 1
