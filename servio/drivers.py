"""Set of drivers a board provides, and the global emergency stop hook."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class Drivers:
    """Drivers set up by a board; any of them may be missing."""

    cfg: Optional[Any] = None
    storage: Optional[Any] = None
    clock: Optional[Any] = None
    position: Optional[Any] = None
    current: Optional[Any] = None
    vcc: Optional[Any] = None
    temperature: Optional[Any] = None
    period_cb: Optional[Any] = None
    motor: Optional[Any] = None
    period: Optional[Any] = None
    comms: Optional[Any] = None
    leds: Optional[Any] = None
    start_cb: Optional[Callable[[Drivers], None]] = None

    _DRIVER_FIELDS = (
        "cfg",
        "storage",
        "clock",
        "position",
        "current",
        "vcc",
        "temperature",
        "period_cb",
        "motor",
        "period",
        "comms",
        "leds",
    )

    def any_uninitialized(self) -> bool:
        """Return True if any driver is missing; the start callback does not count."""
        return any(getattr(self, name) is None for name in self._DRIVER_FIELDS)


class StopCallback:
    """Holds the action that brings the servo to an emergency stop."""

    def __init__(self) -> None:
        self._fn: Optional[Callable[[], None]] = None

    def set(self, fn: Callable[[], None]) -> None:
        """Install ``fn`` as the stop action, replacing any previous one."""
        self._fn = fn

    def __call__(self) -> None:
        if self._fn is None:
            raise RuntimeError("no stop callback installed")
        self._fn()


STOP_CALLBACK = StopCallback()