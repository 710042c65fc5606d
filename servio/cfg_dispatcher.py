"""Applies configuration register changes to the running components."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from .base import ControlLoop, Limits
from .cnv import Converter
from .config import ConfigMap, Key
from .control import Control
from .pid import PidCoefficients


class Metrics(Protocol):
    def set_position_range(self, lim: Limits) -> None: ...

    def set_moving_step(self, step: float) -> None: ...


class Monitor(Protocol):
    def set_minimum_voltage(self, value: float) -> None: ...

    def set_maximum_temperature(self, value: float) -> None: ...


class Motor(Protocol):
    def set_invert(self, invert: bool) -> None: ...


class PositionRange(Protocol):
    @property
    def position_range(self) -> tuple[int, int]: ...


_PID_KEYS = {
    ControlLoop.CURRENT: (Key.CURRENT_LOOP_P, Key.CURRENT_LOOP_I, Key.CURRENT_LOOP_D),
    ControlLoop.VELOCITY: (Key.VELOCITY_LOOP_P, Key.VELOCITY_LOOP_I, Key.VELOCITY_LOOP_D),
    ControlLoop.POSITION: (Key.POSITION_LOOP_P, Key.POSITION_LOOP_I, Key.POSITION_LOOP_D),
}

_LIMIT_KEYS = {
    ControlLoop.CURRENT: (Key.CURRENT_LIM_MIN, Key.CURRENT_LIM_MAX),
    ControlLoop.VELOCITY: (Key.VELOCITY_LIM_MIN, Key.VELOCITY_LIM_MAX),
    ControlLoop.POSITION: (Key.POSITION_LIM_MIN, Key.POSITION_LIM_MAX),
}


def apply_config(ctl: Control, cfg_map: ConfigMap, key: Key | int) -> None:
    """Push the controller-related register ``key`` into ``ctl``."""
    k = Key(key)
    get = cfg_map.get
    for loop, keys in _PID_KEYS.items():
        if k in keys:
            ctl.set_pid(loop, PidCoefficients(*(get(x) for x in keys)))
            return
    for loop, (low, high) in _LIMIT_KEYS.items():
        if k in (low, high):
            ctl.set_limits(loop, Limits(get(low), get(high)))
            return
    if k is Key.VELOCITY_TO_CURR_LIM_SCALE:
        ctl.set_vel_to_curr_lim_scale(get(k))
    elif k is Key.POSITION_TO_VEL_LIM_SCALE:
        ctl.set_pos_to_vel_lim_scale(get(k))
    elif k in (Key.STATIC_FRICTION_SCALE, Key.STATIC_FRICTION_DECAY):
        ctl.set_static_friction(get(Key.STATIC_FRICTION_SCALE), get(Key.STATIC_FRICTION_DECAY))


def apply_all(ctl: Control, cfg_map: ConfigMap) -> None:
    """Push every controller-related register into ``ctl``."""
    for key in Key:
        apply_config(ctl, cfg_map, key)


@dataclass
class ConfigDispatcher:
    """Keeps the configuration map and the components it drives in sync."""

    cfg_map: ConfigMap
    ctl: Control
    conv: Converter
    met: Metrics
    mon: Monitor
    motor: Motor
    pos: PositionRange

    def set(self, key: Key | int, value: object) -> None:
        """Store ``value`` into register ``key`` and apply it."""
        self.cfg_map.set(key, value)
        self.apply(key)

    def get(self, key: Key | int) -> object:
        return self.cfg_map.get(key)

    def full_apply(self) -> None:
        """Apply every register."""
        for key in Key:
            self.apply(key)

    def apply(self, key: Key | int) -> None:
        """Apply register ``key`` to the component it configures."""
        k = Key(key)
        get = self.cfg_map.get
        if k in (Key.POSITION_LOW_ANGLE, Key.POSITION_HIGH_ANGLE):
            low = get(Key.POSITION_LOW_ANGLE)
            high = get(Key.POSITION_HIGH_ANGLE)
            self.met.set_position_range(Limits(low, high))
            min_val, max_val = self.pos.position_range
            self.conv.set_position_cfg(min_val, low, max_val, high)
        elif k in (Key.CURRENT_CONV_SCALE, Key.CURRENT_CONV_OFFSET):
            self.conv.set_current_cfg(get(Key.CURRENT_CONV_SCALE), get(Key.CURRENT_CONV_OFFSET))
        elif k in (Key.TEMP_CONV_SCALE, Key.TEMP_CONV_OFFSET):
            self.conv.set_temp_cfg(get(Key.TEMP_CONV_SCALE), get(Key.TEMP_CONV_OFFSET))
        elif k is Key.VOLTAGE_CONV_SCALE:
            self.conv.set_vcc_cfg(get(k))
        elif k is Key.INVERT_HBRIDGE:
            self.motor.set_invert(get(k))
        elif k is Key.MINIMUM_VOLTAGE:
            self.mon.set_minimum_voltage(get(k))
        elif k is Key.MAXIMUM_TEMPERATURE:
            self.mon.set_maximum_temperature(get(k))
        elif k is Key.MOVING_DETECTION_STEP:
            self.met.set_moving_step(get(k))
        apply_config(self.ctl, self.cfg_map, k)