"""Interrupt callbacks that feed measurements into the controller."""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from statistics import fmean
from typing import Protocol

from . import cnv
from .cnv import Converter
from .control import Control


class Clock(Protocol):
    """Source of the current time in microseconds."""

    def now(self) -> int: ...


class PwmMotor(Protocol):
    """Motor driven by a power value that also reports its direction."""

    @property
    def direction(self) -> int: ...

    def set_power(self, power: float) -> None: ...


class Metrics(Protocol):
    """Position metrics computed from raw position samples."""

    @property
    def position(self) -> float: ...

    @property
    def velocity(self) -> float: ...

    @property
    def is_moving(self) -> bool: ...

    def position_irq(self, now: int, position: float) -> None: ...


class PeriodDriver(Protocol):
    def set_period_callback(self, cb: object) -> None: ...


class PositionDriver(Protocol):
    def set_position_callback(self, cb: object) -> None: ...


class CurrentDriver(Protocol):
    def set_current_callback(self, cb: object) -> None: ...


class AvgFilter:
    """Moving average over the last ``SIZE`` values, initially all zero."""

    SIZE = 16

    def __init__(self) -> None:
        self._buffer: deque[float] = deque([0.0] * self.SIZE, maxlen=self.SIZE)

    def add(self, value: float) -> None:
        """Replace the oldest value with ``value``."""
        self._buffer.append(value)

    def get(self) -> float:
        """Return the average of the buffered values."""
        return fmean(self._buffer)


class CurrentCallback:
    """Runs the current loop on every current sample and drives the motor."""

    def __init__(self, motor: PwmMotor, ctl: Control, clk: Clock, conv: Converter) -> None:
        self.filter = AvgFilter()
        self._motor = motor
        self._ctl = ctl
        self._clk = clk
        self._conv = conv

    def on_value_irq(self, curr: int, samples: Sequence[int]) -> None:
        """Handle a raw current reading; ``samples`` are the detailed readings."""
        self.filter.add(cnv.current(self._conv, curr, self._motor))
        self._ctl.current_irq(self._clk.now(), self.filter.get())
        self._motor.set_power(self._ctl.power())


class PositionCallback:
    """Feeds position samples into the metrics and the outer control loops."""

    def __init__(self, ctl: Control, met: Metrics, clk: Clock, conv: Converter) -> None:
        self._ctl = ctl
        self._met = met
        self._clk = clk
        self._conv = conv

    def on_value_irq(self, position: int) -> None:
        """Handle a raw position reading."""
        now = self._clk.now()
        self._met.position_irq(now, self._conv.position.convert(position))
        self._ctl.moving_irq(now, self._met.is_moving)
        self._ctl.position_irq(now, self._met.position)
        self._ctl.velocity_irq(now, self._met.velocity)


class StandardCallbacks:
    """The usual pair of current and position callbacks."""

    def __init__(
        self, motor: PwmMotor, clk: Clock, ctl: Control, met: Metrics, conv: Converter
    ) -> None:
        self.current_cb = CurrentCallback(motor, ctl, clk, conv)
        self.pos_cb = PositionCallback(ctl, met, clk, conv)

    def set_callbacks(
        self,
        period: PeriodDriver,
        period_cb: object,
        pos_drv: PositionDriver,
        curr_drv: CurrentDriver,
    ) -> None:
        """Register the callbacks with their drivers."""
        period.set_period_callback(period_cb)
        curr_drv.set_current_callback(self.current_cb)
        pos_drv.set_position_callback(self.pos_cb)