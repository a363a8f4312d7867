"""
Simulated first-order thermal process for exercising a controller without
hardware.

The heater drives the temperature toward ambient + heater_gain * power with a
single time constant.  The update uses the exact discretisation of a first-order
lag, so large steps stay stable:

    T += (target - T) * (1 - exp(-dt / tau))

Readings optionally carry Gaussian sensor noise drawn from a seeded numpy
Generator so closed-loop runs are reproducible.
"""

import logging
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)


class ThermalPlant:
    """Room heated by an actuator whose power is normally in [0, 1]."""

    def __init__(
        self,
        initial_temperature: float = 20.0,
        ambient_temperature: float = 15.0,
        heater_gain: float = 40.0,
        time_constant: float = 60.0,
        noise_std: float = 0.0,
        seed: Optional[int] = None,
    ) -> None:
        if time_constant <= 0:
            raise ValueError(f"time_constant must be > 0, got {time_constant}")
        if noise_std < 0:
            raise ValueError(f"noise_std must be >= 0, got {noise_std}")

        self.ambient_temperature = float(ambient_temperature)
        self.heater_gain = float(heater_gain)
        self.time_constant = float(time_constant)
        self.noise_std = float(noise_std)

        self._true_temperature = float(initial_temperature)
        self._rng = np.random.default_rng(seed)
        self._reading = self._measure()

        logger.info(
            "ThermalPlant ready: T0=%.2f ambient=%.2f gain=%.2f tau=%.1fs noise=%.3f",
            self._true_temperature, self.ambient_temperature,
            self.heater_gain, self.time_constant, self.noise_std,
        )

    @property
    def temperature(self) -> float:
        """Last sensor reading (includes noise)."""
        return self._reading

    @property
    def true_temperature(self) -> float:
        return self._true_temperature

    def step(self, power: float, dt: float) -> float:
        """Advance the process by dt seconds at the given heater power."""
        if dt > 0:
            target = self.ambient_temperature + self.heater_gain * power
            alpha = 1.0 - np.exp(-dt / self.time_constant)
            self._true_temperature += (target - self._true_temperature) * float(alpha)
            self._reading = self._measure()
        return self._reading

    def _measure(self) -> float:
        if self.noise_std == 0:
            return self._true_temperature
        return self._true_temperature + float(self._rng.normal(0.0, self.noise_std))
