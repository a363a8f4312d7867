"""Discrete PID controller with a simulated thermostat loop."""

from .pid import InvalidLimitsError, PIDController

__all__ = ["InvalidLimitsError", "PIDController"]
