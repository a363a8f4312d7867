"""Tests for the monitoring web app."""

from __future__ import annotations

import pytest

from pidctrl.web_server import SharedState, create_app


@pytest.fixture
def shared_state() -> SharedState:
    return SharedState()


@pytest.fixture
def client(shared_state):
    app = create_app(shared_state)
    app.testing = True
    return app.test_client()


class TestStatus:

    def test_initial_status(self, client) -> None:
        response = client.get("/status")
        assert response.status_code == 200
        assert response.get_json() == {
            "setpoint": 0.0, "measurement": 0.0, "output": 0.0, "steps": 0,
        }

    def test_status_reflects_updates(self, client, shared_state) -> None:
        shared_state.update(setpoint=21.0, measurement=19.12345, output=0.812345)
        shared_state.update(setpoint=21.0, measurement=19.5, output=0.75)
        body = client.get("/status").get_json()
        assert body["measurement"] == 19.5
        assert body["output"] == 0.75
        assert body["steps"] == 2


class TestSetpoint:

    def test_request_is_queued(self, client, shared_state) -> None:
        response = client.post("/setpoint", json={"setpoint": 23.5})
        assert response.status_code == 202
        assert response.get_json() == {"pending_setpoint": 23.5}
        assert shared_state.take_setpoint_request() == 23.5
        assert shared_state.take_setpoint_request() is None

    @pytest.mark.parametrize("body", [
        {},
        {"setpoint": "warm"},
        {"setpoint": True},
        {"other": 1},
        [1, 2],
        {"setpoint": 10 ** 400},
    ])
    def test_invalid_body_rejected(self, client, shared_state, body) -> None:
        response = client.post("/setpoint", json=body)
        assert response.status_code == 400
        assert shared_state.take_setpoint_request() is None

    def test_non_json_body_rejected(self, client) -> None:
        response = client.post("/setpoint", data="22", content_type="text/plain")
        assert response.status_code == 400
