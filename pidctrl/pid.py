"""
Discrete PID controller with derivative-on-measurement and back-calculation
anti-windup.

The controller is a plain mutable object owned by a single control loop.  It
does no I/O and never blocks; callers sharing one instance across threads must
serialize access themselves.

Design decisions:
  - Derivative-on-measurement (not on error) so a setpoint step produces no
    derivative kick.  Only movement of the measured signal feeds the D term.
  - The previous measurement starts at 0.0, so the very first update sees a
    derivative transient as if the measurement jumped from zero.
  - Anti-windup by back-calculation: when the output is clamped, the stored
    integral is rewritten as (clamped output - P - D) for the same update.
  - A zero elapsed time skips integration and forces D to exactly 0.0.
  - update() without an elapsed time measures it from a monotonic clock,
    using sample_period on the very first call.
"""

import logging
import time
from datetime import timedelta
from typing import Callable, Optional, Tuple, Union

logger = logging.getLogger(__name__)

Elapsed = Union[float, int, timedelta]


class InvalidLimitsError(ValueError):
    """Raised when output limits are configured with minimum > maximum."""

    def __init__(self, minimum: float, maximum: float) -> None:
        super().__init__(
            f"Invalid output limits: minimum {minimum} is greater than maximum {maximum}"
        )
        self.minimum = minimum
        self.maximum = maximum


class PIDController:
    """Discrete PID with optional output clamping and wall-clock updates."""

    def __init__(
        self,
        kp: float,
        ki: float,
        kd: float,
        sample_period: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            kp, ki, kd:    Gains.  Any real value is accepted; zero disables
                           the corresponding term.
            sample_period: Elapsed time (seconds) assumed by the first
                           wall-clock update, when no previous timestamp exists.
            clock:         Monotonic time source in seconds.

        Raises:
            ValueError: If sample_period is negative.
        """
        if sample_period < 0:
            raise ValueError(f"sample_period must be >= 0, got {sample_period}")

        self._kp = float(kp)
        self._ki = float(ki)
        self._kd = float(kd)
        self._sample_period = float(sample_period)
        self._clock = clock

        self._setpoint: float = 0.0
        self._output_min: Optional[float] = None
        self._output_max: Optional[float] = None

        self._integral: float = 0.0
        self._prev_measurement: float = 0.0
        self._last_time: Optional[float] = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def kp(self) -> float:
        return self._kp

    @property
    def ki(self) -> float:
        return self._ki

    @property
    def kd(self) -> float:
        return self._kd

    @property
    def gains(self) -> Tuple[float, float, float]:
        return self._kp, self._ki, self._kd

    @property
    def setpoint(self) -> float:
        return self._setpoint

    def set_setpoint(self, value: float) -> None:
        """
        Change the target.  Integral state and the previous measurement are
        kept, so the output stays continuous across setpoint changes.
        """
        self._setpoint = float(value)

    @property
    def output_limits(self) -> Tuple[Optional[float], Optional[float]]:
        return self._output_min, self._output_max

    def set_output_limits(
        self, minimum: Optional[float], maximum: Optional[float]
    ) -> None:
        """
        Set the output clamp.  Clamping applies only while both bounds are set;
        pass (None, None) to disable it.

        The stored integral is not re-clamped here.  If it lies outside the new
        bounds, the next update saturates and back-calculation corrects it.

        Raises:
            InvalidLimitsError: If both bounds are set and minimum > maximum.
                                The controller is left untouched.
        """
        if minimum is not None and maximum is not None and minimum > maximum:
            logger.warning(
                "Rejected output limits: min=%s > max=%s", minimum, maximum
            )
            raise InvalidLimitsError(minimum, maximum)

        self._output_min = None if minimum is None else float(minimum)
        self._output_max = None if maximum is None else float(maximum)
        logger.debug(
            "Output limits set to [%s, %s]", self._output_min, self._output_max
        )

    # ------------------------------------------------------------------
    # State inspection
    # ------------------------------------------------------------------

    @property
    def integral(self) -> float:
        """Current integral contribution to the output (already scaled by ki)."""
        return self._integral

    @property
    def prev_measurement(self) -> float:
        return self._prev_measurement

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def update(self, measurement: float, elapsed: Optional[Elapsed] = None) -> float:
        """
        Compute one PID step and return the (possibly clamped) output.

        Args:
            measurement: Current process value.
            elapsed:     Time since the previous update, in seconds or as a
                         timedelta.  None measures it from the clock; the very
                         first such call uses sample_period instead.

        Returns:
            P + I + D, clamped to the output limits when both are set.

        Raises:
            ValueError: If an explicit elapsed time is negative.
        """
        now = self._clock()

        if elapsed is None:
            if self._last_time is None:
                dt = self._sample_period
            else:
                dt = max(0.0, now - self._last_time)
        elif isinstance(elapsed, timedelta):
            dt = elapsed.total_seconds()
        else:
            dt = float(elapsed)

        if dt < 0:
            raise ValueError(f"elapsed time must be >= 0, got {dt}")

        self._last_time = now
        return self._compute(float(measurement), dt)

    def reset(self) -> None:
        """
        Clear integral, previous measurement and clock state.

        Gains, setpoint and output limits are kept.
        """
        self._integral = 0.0
        self._prev_measurement = 0.0
        self._last_time = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _compute(self, measurement: float, dt: float) -> float:
        error = self._setpoint - measurement

        # Proportional
        p_term = self._kp * error

        # Integral, stored as its contribution to the output
        if dt > 0:
            self._integral += self._ki * error * dt
        i_term = self._integral

        # Derivative-on-measurement; exactly zero when no time has passed
        if dt > 0:
            d_term = -self._kd * (measurement - self._prev_measurement) / dt
        else:
            d_term = 0.0

        raw = p_term + i_term + d_term
        output = self._clamp(raw)

        # Back-calculation: drop the integral excess that caused saturation
        if output != raw:
            self._integral = output - p_term - d_term

        self._prev_measurement = measurement
        return output

    def _clamp(self, value: float) -> float:
        if self._output_min is None or self._output_max is None:
            return value
        return max(self._output_min, min(self._output_max, value))
