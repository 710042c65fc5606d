"""Basic types and constants shared across the servo firmware model."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

INFTY: float = math.inf
PI: float = math.pi
PIPI: float = 2.0 * math.pi

#: Power is expressed as a plain float in the range ``P_LOW`` .. ``P_MAX``.
P_MAX: float = 1.0
P_LOW: float = -1.0

_MICROS_PER_SECOND = 1_000_000
_MICROS_PER_MILLI = 1_000


def from_seconds(secs: int) -> int:
    """Return the number of microseconds in ``secs`` seconds."""
    return secs * _MICROS_PER_SECOND


def from_millis(msecs: int) -> int:
    """Return the number of microseconds in ``msecs`` milliseconds."""
    return msecs * _MICROS_PER_MILLI


class ControlMode(Enum):
    """Mode the controller operates in."""

    DISENGAGED = "disengaged"
    POWER = "power"
    CURRENT = "current"
    VELOCITY = "velocity"
    POSITION = "position"


class ControlLoop(Enum):
    """Individual regulation loops of the controller."""

    CURRENT = "current"
    VELOCITY = "velocity"
    POSITION = "position"


@dataclass
class LedsVals:
    """State of the indication LEDs."""

    red: bool
    blue: bool
    green: int


@dataclass
class Limits:
    """Closed interval ``[low, high]``."""

    low: float
    high: float

    def intersection(self, other: Limits) -> Limits:
        """Return the overlap of both intervals."""
        return Limits(max(self.low, other.low), min(self.high, other.high))

    def clamp(self, value: float) -> float:
        """Clamp ``value`` into the interval."""
        return max(self.low, min(value, self.high))