"""Closed-loop tests for ControlLoop."""

from __future__ import annotations

import pytest

from pidctrl.loop import ControlLoop, LoopSample
from pidctrl.pid import PIDController
from pidctrl.plant import ThermalPlant
from pidctrl.web_server import SharedState


def make_loop(shared_state=None) -> ControlLoop:
    pid = PIDController(0.6, 0.02, 0.5)
    pid.set_output_limits(0.0, 1.0)
    pid.set_setpoint(21.0)
    plant = ThermalPlant(initial_temperature=16.0, ambient_temperature=15.0,
                         heater_gain=20.0, time_constant=30.0)
    return ControlLoop(pid, plant, period=0.5, shared_state=shared_state)


class TestControlLoop:

    def test_step_returns_sample(self) -> None:
        loop = make_loop()
        sample = loop.step(0.5)
        assert isinstance(sample, LoopSample)
        assert sample.measurement == 16.0
        assert sample.setpoint == 21.0
        assert 0.0 <= sample.output <= 1.0
        assert loop.steps == 1

    def test_converges_to_setpoint(self) -> None:
        loop = make_loop()
        for _ in range(2000):
            sample = loop.step(0.5)
        assert sample.measurement == pytest.approx(21.0, abs=0.2)
        assert 0.0 <= sample.output <= 1.0

    def test_pending_setpoint_applied_and_published(self) -> None:
        shared = SharedState()
        loop = make_loop(shared)
        shared.request_setpoint(25.0)

        sample = loop.step(0.5)

        assert loop.controller.setpoint == 25.0
        assert sample.setpoint == 25.0
        assert shared.take_setpoint_request() is None
        status = shared.get_status()
        assert status["setpoint"] == 25.0
        assert status["steps"] == 1

    def test_run_stops_after_max_steps(self, monkeypatch) -> None:
        monkeypatch.setattr("pidctrl.loop.time.sleep", lambda _s: None)
        loop = make_loop()
        assert loop.run(max_steps=5) == 5
        assert loop.steps == 5

    def test_stop_ends_run(self, monkeypatch) -> None:
        loop = make_loop()

        def fake_sleep(_seconds):
            if loop.steps >= 3:
                loop.stop()

        monkeypatch.setattr("pidctrl.loop.time.sleep", fake_sleep)
        assert loop.run() == 3

    def test_invalid_period(self) -> None:
        with pytest.raises(ValueError):
            ControlLoop(PIDController(1, 0, 0), ThermalPlant(), period=0.0)
