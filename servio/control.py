"""Cascaded position/velocity/current controller."""

from __future__ import annotations

from typing import Optional

from .base import INFTY, P_LOW, P_MAX, ControlLoop, ControlMode, Limits
from .pid import ControlConfig, Pid, PidCoefficients
from .regulator import LinearTransitionRegulator

#: Largest finite 32-bit float, the default limit scaling.
FLOAT_MAX = 3.4028234663852886e38


def _copy(lim: Limits) -> Limits:
    return Limits(lim.low, lim.high)


class Control:
    """Controller that turns goals and measurements into motor power."""

    def __init__(self, now: int, cfg: Optional[ControlConfig] = None) -> None:
        cfg = cfg if cfg is not None else ControlConfig()
        self._state = ControlMode.POWER

        self._position_lims = _copy(cfg.position_limits)
        self._position_goal = 0.0
        self._position_pid = Pid(now, cfg.position_pid, cfg.current_limits)
        self._pos_to_vel_lim_scale = FLOAT_MAX

        self._velocity_config_lims = Limits(-INFTY, INFTY)
        self._velocity_pos_derived_lims = Limits(-INFTY, INFTY)
        self._velocity_goal = 0.0
        self._velocity_pid = Pid(now, cfg.velocity_pid, cfg.current_limits)
        self._vel_to_curr_lim_scale = FLOAT_MAX

        self._current_config_lims = Limits(-INFTY, INFTY)
        self._current_vel_derived_lims = Limits(-INFTY, INFTY)
        self._current_goal = 0.0
        self._current_scale_regl = LinearTransitionRegulator(
            low_point=1.0, high_point=2.0, last_time=now
        )
        self._current_pid = Pid(now, cfg.current_pid, Limits(P_LOW, P_MAX))

        self._power = 0.0
        self.set_static_friction(cfg.static_friction_scale, cfg.static_friction_decay)

    def _module(self, loop: ControlLoop) -> Pid:
        if loop is ControlLoop.CURRENT:
            return self._current_pid
        if loop is ControlLoop.VELOCITY:
            return self._velocity_pid
        return self._position_pid

    def set_pid(self, loop: ControlLoop, coeffs: PidCoefficients) -> None:
        self._module(loop).coefficients = coeffs

    def set_limits(self, loop: ControlLoop, lim: Limits) -> None:
        if loop is ControlLoop.CURRENT:
            self._current_config_lims = _copy(lim)
            self._velocity_pid.update_limits(lim)
            self._position_pid.update_limits(lim)
        elif loop is ControlLoop.VELOCITY:
            self._velocity_config_lims = _copy(lim)
        else:
            self._position_lims = _copy(lim)

    def set_static_friction(self, scale: float, decay: float) -> None:
        self._current_scale_regl.set_config(scale, decay)

    def set_pos_to_vel_lim_scale(self, scale: float) -> None:
        self._pos_to_vel_lim_scale = scale

    def set_vel_to_curr_lim_scale(self, scale: float) -> None:
        self._vel_to_curr_lim_scale = scale

    def disengage(self) -> None:
        self._state = ControlMode.DISENGAGED
        self._power = 0.0

    def switch_to_power_control(self, power: float) -> None:
        self._state = ControlMode.POWER
        self._power = power

    def switch_to_current_control(self, now: int, current: float) -> None:
        self._state = ControlMode.CURRENT
        self._current_goal = self._current_config_lims.clamp(current)

    def switch_to_velocity_control(self, now: int, velocity: float) -> None:
        self._state = ControlMode.VELOCITY
        self._velocity_goal = self._velocity_config_lims.clamp(velocity)
        self._velocity_pid.i_sum = 0.0

    def switch_to_position_control(self, now: int, position: float) -> None:
        self._state = ControlMode.POSITION
        self._position_goal = self._position_lims.clamp(position)
        self._position_pid.i_sum = 0.0

    def moving_irq(self, now: int, is_moving: bool) -> None:
        self._current_scale_regl.update(now, is_moving)

    def position_irq(self, now: int, position: float) -> None:
        scale = self._pos_to_vel_lim_scale
        self._velocity_pos_derived_lims = Limits(
            scale * (self._position_lims.low - position),
            scale * (self._position_lims.high - position),
        )
        if self._state is ControlMode.POSITION:
            self._position_pid.update(now, position, self._position_goal)
        else:
            self._position_pid.reset(now, position)

    def velocity_irq(self, now: int, velocity: float) -> None:
        vlims = self._velocity_limits()
        scale = self._vel_to_curr_lim_scale
        self._current_vel_derived_lims = Limits(
            scale * (vlims.low - velocity), scale * (vlims.high - velocity)
        )
        if self._state is ControlMode.VELOCITY:
            goal = vlims.clamp(self._velocity_goal)
            self._velocity_pid.update(now, velocity, goal)
        else:
            self._velocity_pid.reset(now, velocity)

    def current_irq(self, now: int, current: float) -> None:
        if self._state in (ControlMode.DISENGAGED, ControlMode.POWER):
            self._current_pid.reset(now, current)
            return
        desired = self._current_limits().clamp(self.desired_current())
        self._power = self._current_pid.update(now, current, desired)

    def power(self) -> float:
        return self._power

    def desired_current(self) -> float:
        if self._state is ControlMode.CURRENT:
            return self._current_goal
        if self._state is ControlMode.VELOCITY:
            return self._velocity_pid.output * self._current_scale_regl.state
        if self._state is ControlMode.POSITION:
            return self._position_pid.output * self._current_scale_regl.state
        return 0.0

    def desired_velocity(self) -> float:
        return self._velocity_goal

    def desired_position(self) -> float:
        return self._position_goal

    def mode(self) -> ControlMode:
        return self._state

    def _current_limits(self) -> Limits:
        return self._current_config_lims.intersection(self._current_vel_derived_lims)

    def _velocity_limits(self) -> Limits:
        return self._velocity_config_lims.intersection(self._velocity_pos_derived_lims)