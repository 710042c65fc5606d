"""Simple simulated DC motor used to exercise the controller."""

from __future__ import annotations

import math

from .base import P_LOW, P_MAX
from .cnv import map_range

AngleVec = tuple[float, float]


def rotate_vec(v: AngleVec, angle: float) -> AngleVec:
    """Rotate a 2D vector by ``angle`` radians."""
    c = math.cos(angle)
    s = math.sin(angle)
    return (c * v[0] - s * v[1], s * v[0] + c * v[1])


class SimpleMotor:
    """Crude motor model: power drives current, current drives acceleration."""

    def __init__(self, pos: float = 0.0) -> None:
        self.power = 0.0
        self.current = 0.0
        self.velocity = 0.0
        self.pos_vec: AngleVec = rotate_vec((1.0, 0.0), pos)
        self.last_t = 0.0
        self.static_friction_vel = 0.02
        self.static_friction_force = 0.7

    def reset_time(self, now: int) -> None:
        """Set the reference time, in microseconds."""
        self.last_t = now / 1_000_000.0

    def apply_power(self, now: int, power: float) -> None:
        """Advance the simulation to ``now`` (microseconds) with ``power`` applied."""
        t = now / 1_000_000.0
        self.power = power
        t_diff = t - self.last_t
        if t_diff == 0.0:
            return
        try:
            self.current = self.power_to_current(power)
            force = self.current * 15.0

            if (
                abs(self.velocity) < self.static_friction_vel
                and abs(force) < self.static_friction_force
            ):
                self.velocity = 0.0
                return

            acc = force - self.resistance(self.velocity)
            self.velocity += acc * t_diff
            self.pos_vec = rotate_vec(self.pos_vec, self.velocity * t_diff)
        finally:
            self.last_t = t

    def position(self) -> float:
        """Current angle in radians, in ``(-pi, pi]``."""
        return math.atan2(self.pos_vec[1], self.pos_vec[0])

    @staticmethod
    def resistance(vel: float) -> float:
        return min(0.05, vel) + vel * 0.1

    @staticmethod
    def power_to_current(p: float) -> float:
        return map_range(p, P_LOW, P_MAX, -3.0, 3.0)

    def __str__(self) -> str:
        return f"\t{self.power}\t{self.current}\t{self.velocity}\t{self.position()}"