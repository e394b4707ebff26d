"""Tests for the Flask control API."""

import pytest

from config import get_builtin_config
from core.timers import ManualTimerService
from core.wall import Wall
from flask_app import create_app


@pytest.fixture
def wall():
    config = get_builtin_config()
    config["monitor"]["enabled"] = True
    return Wall(config, ManualTimerService(start=0))


@pytest.fixture
def client(wall):
    app = create_app(wall)
    app.testing = True
    return app.test_client()


class TestControlApi:

    def test_status(self, client):
        resp = client.get("/api/status")
        assert resp.status_code == 200
        assert resp.get_json()["state"] == "Idle"

    def test_modules(self, client):
        data = client.get("/api/modules").get_json()
        assert [m["name"] for m in data["modules"]] == ["clock", "welcome", "countdown"]
        assert all(m["loaded"] for m in data["modules"])

    def test_play_queues_switch(self, client, wall):
        resp = client.post("/api/play", json={"module": "welcome", "delay_ms": 1000})
        assert resp.status_code == 202
        assert resp.get_json() == {"accepted": True, "module": "welcome"}

        wall.bus.drain()
        assert wall.machine.state_name == "Transitioning"
        assert wall.machine.state.deadline == 1000

    def test_play_unknown_module(self, client, wall):
        resp = client.post("/api/play", json={"module": "nope"})
        assert resp.status_code == 404
        assert "nope" in resp.get_json()["error"]

        requested = []
        wall.bus.subscribe("switch", requested.append)
        wall.bus.drain()
        assert requested == []
        assert wall.machine.state_name == "Idle"

    def test_monitoring_queues_nothing_on_the_bus(self, wall):
        wall.request_switch("welcome", delay_ms=0)
        assert wall.monitor.history()
        assert wall.bus.drain() == 0

    @pytest.mark.parametrize("body", [
        None,
        {"delay_ms": 10},
        {"module": 5},
        {"module": "clock", "delay_ms": -1},
        {"module": "clock", "hold_ms": "soon"},
    ])
    def test_play_bad_payload(self, client, body):
        resp = client.post("/api/play", json=body)
        assert resp.status_code == 400

    def test_monitor(self, client):
        data = client.get("/api/monitor?limit=5").get_json()
        assert data["enabled"] is True
        assert data["observations"][0]["state"] == "Idle"

    def test_monitor_limit_zero_returns_nothing(self, client, wall):
        wall.request_switch("welcome", delay_ms=0)
        assert client.get("/api/monitor?limit=0").get_json()["observations"] == []
        assert len(client.get("/api/monitor?limit=2").get_json()["observations"]) == 2
