"""PID regulator and the controller configuration built on it."""

from __future__ import annotations

from dataclasses import dataclass, field

from .base import Limits


@dataclass(frozen=True)
class PidCoefficients:
    """Proportional, integral and derivative gains."""

    p: float = 1.0
    i: float = 0.0
    d: float = 0.0


class Pid:
    """PID regulator working on integer timestamps (microseconds).

    The integral term and the output are both clamped into ``limits``;
    the derivative is taken from the measured value, not from the error.
    """

    def __init__(self, now: int, coefficients: PidCoefficients, limits: Limits) -> None:
        self.coefficients = coefficients
        self.limits = Limits(limits.low, limits.high)
        self.i_sum = 0.0
        self.output = 0.0
        self.last_measured = 0.0
        self.last_time = now

    def update(self, now: int, measured: float, desired: float) -> float:
        """Advance the regulator to ``now`` and return the new output."""
        if now == self.last_time:
            return self.output
        t_diff = float(now - self.last_time)
        error = desired - measured
        coeffs = self.coefficients

        self.i_sum = self.limits.clamp(self.i_sum + coeffs.i * error * t_diff)
        input_diff = (measured - self.last_measured) / t_diff
        self.output = self.limits.clamp(
            coeffs.p * error + self.i_sum - coeffs.d * input_diff
        )

        self.last_measured = measured
        self.last_time = now
        return self.output

    def reset(self, now: int, measured: float) -> None:
        """Track ``measured`` at ``now`` without producing output."""
        self.last_time = now
        self.last_measured = measured

    def update_limits(self, limits: Limits) -> None:
        """Replace the limits, clamping the current state into them."""
        self.limits = Limits(limits.low, limits.high)
        self.i_sum = self.limits.clamp(self.i_sum)
        self.output = self.limits.clamp(self.output)


def _zero_limits() -> Limits:
    return Limits(0.0, 0.0)


@dataclass
class ControlConfig:
    """Initial configuration of the controller."""

    position_pid: PidCoefficients = field(default_factory=PidCoefficients)
    velocity_pid: PidCoefficients = field(default_factory=PidCoefficients)
    current_pid: PidCoefficients = field(default_factory=PidCoefficients)

    position_limits: Limits = field(default_factory=_zero_limits)
    velocity_limits: Limits = field(default_factory=_zero_limits)
    current_limits: Limits = field(default_factory=_zero_limits)

    static_friction_scale: float = 0.0
    static_friction_decay: float = 0.0