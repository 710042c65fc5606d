"""Mapping between interface field names and configuration register keys."""

from __future__ import annotations

from .config import Key

_IFACE_TO_CFG: dict[str, Key] = {
    "model": Key.MODEL,
    "id": Key.ID,
    "group_id": Key.GROUP_ID,
    "encoder_mode": Key.ENCODER_MODE,
    "position_lower_angle": Key.POSITION_LOW_ANGLE,
    "position_higher_angle": Key.POSITION_HIGH_ANGLE,
    "current_conv_scale": Key.CURRENT_CONV_SCALE,
    "current_conv_offset": Key.CURRENT_CONV_OFFSET,
    "temp_conv_scale": Key.TEMP_CONV_SCALE,
    "temp_conv_offset": Key.TEMP_CONV_OFFSET,
    "voltage_conv_scale": Key.VOLTAGE_CONV_SCALE,
    "invert_hbridge": Key.INVERT_HBRIDGE,
    "current_loop_p": Key.CURRENT_LOOP_P,
    "current_loop_i": Key.CURRENT_LOOP_I,
    "current_loop_d": Key.CURRENT_LOOP_D,
    "current_lim_min": Key.CURRENT_LIM_MIN,
    "current_lim_max": Key.CURRENT_LIM_MAX,
    "velocity_loop_p": Key.VELOCITY_LOOP_P,
    "velocity_loop_i": Key.VELOCITY_LOOP_I,
    "velocity_loop_d": Key.VELOCITY_LOOP_D,
    "velocity_lim_min": Key.VELOCITY_LIM_MIN,
    "velocity_lim_max": Key.VELOCITY_LIM_MAX,
    "velocity_to_current_lim_scale": Key.VELOCITY_TO_CURR_LIM_SCALE,
    "position_loop_p": Key.POSITION_LOOP_P,
    "position_loop_i": Key.POSITION_LOOP_I,
    "position_loop_d": Key.POSITION_LOOP_D,
    "position_lim_min": Key.POSITION_LIM_MIN,
    "position_lim_max": Key.POSITION_LIM_MAX,
    "position_to_velocity_lim_scale": Key.POSITION_TO_VEL_LIM_SCALE,
    "static_friction_scale": Key.STATIC_FRICTION_SCALE,
    "static_friction_decay": Key.STATIC_FRICTION_DECAY,
    "moving_detection_step": Key.MOVING_DETECTION_STEP,
    "minimum_voltage": Key.MINIMUM_VOLTAGE,
    "maximum_temperature": Key.MAXIMUM_TEMPERATURE,
    "quad_encoder_range": Key.QUAD_ENCD_RANGE,
}

_CFG_TO_IFACE: dict[Key, str] = {key: name for name, key in _IFACE_TO_CFG.items()}


def cfg_key_for(name: str) -> Key:
    """Return the register key for interface field ``name``."""
    try:
        return _IFACE_TO_CFG[name]
    except KeyError:
        raise KeyError(f"unknown configuration field: {name!r}") from None


def iface_name_for(key: Key | int) -> str:
    """Return the interface field name of register ``key``."""
    return _CFG_TO_IFACE[Key(key)]


def iface_names() -> tuple[str, ...]:
    """Return all interface field names in interface order."""
    return tuple(_IFACE_TO_CFG)