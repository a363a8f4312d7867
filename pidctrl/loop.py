"""
Closed control loop tying a PIDController to a ThermalPlant.

The loop is the sole owner of its controller.  Setpoint requests coming from
other threads go through SharedState and are applied at the start of a step.

Per step:
  1. Apply a pending setpoint request, if any
  2. Read the current measurement from the plant
  3. Compute the controller output
  4. Drive the plant with that output for one period
  5. Publish the step to SharedState
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from .pid import PIDController
from .plant import ThermalPlant
from .web_server import SharedState

logger = logging.getLogger(__name__)


@dataclass
class LoopSample:
    """Result of one control step."""
    measurement: float
    setpoint: float
    output: float


class ControlLoop:
    """Fixed-period sense → compute → actuate loop."""

    def __init__(
        self,
        controller: PIDController,
        plant: ThermalPlant,
        period: float,
        shared_state: Optional[SharedState] = None,
        status_every: int = 0,
    ) -> None:
        if period <= 0:
            raise ValueError(f"period must be > 0, got {period}")

        self.controller = controller
        self.plant = plant
        self.period = float(period)
        self.shared_state = shared_state
        self.status_every = int(status_every)

        self.steps = 0
        self._running = False

    def step(self, dt: Optional[float] = None) -> LoopSample:
        """
        Run one control cycle.

        Args:
            dt: Seconds since the previous step.  None uses the controller's
                wall clock for the update and the nominal period for the plant.
        """
        if self.shared_state is not None:
            requested = self.shared_state.take_setpoint_request()
            if requested is not None:
                logger.info(
                    "Setpoint %.3f → %.3f", self.controller.setpoint, requested
                )
                self.controller.set_setpoint(requested)

        measurement = self.plant.temperature
        output = self.controller.update(measurement, dt)
        self.plant.step(output, self.period if dt is None else dt)

        sample = LoopSample(
            measurement=measurement,
            setpoint=self.controller.setpoint,
            output=output,
        )
        self.steps += 1

        if self.shared_state is not None:
            self.shared_state.update(sample.setpoint, sample.measurement, sample.output)

        if self.status_every and self.steps % self.status_every == 0:
            logger.info(
                "step=%d setpoint=%.2f measurement=%.2f output=%.3f",
                self.steps, sample.setpoint, sample.measurement, sample.output,
            )
        return sample

    def run(self, max_steps: Optional[int] = None) -> int:
        """
        Step at the nominal period until stop() is called or max_steps is
        reached.  Returns the number of steps taken by this call.
        """
        self._running = True
        taken = 0
        logger.info("Control loop running: period=%.3fs", self.period)
        try:
            while self._running and (max_steps is None or taken < max_steps):
                self.step()
                taken += 1
                time.sleep(self.period)
        finally:
            self._running = False
            logger.info("Control loop stopped after %d steps.", taken)
        return taken

    def stop(self) -> None:
        self._running = False
