"""Conversion of raw sensor readings into physical units."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


class MotorInfo(Protocol):
    """Anything that reports the direction the motor is driven in."""

    @property
    def direction(self) -> int: ...


class PositionSource(Protocol):
    """Anything that reports a raw position reading."""

    @property
    def position(self) -> int: ...


def map_range(
    value: float, from_low: float, from_high: float, to_low: float, to_high: float
) -> float:
    """Linearly map ``value`` from one range onto another."""
    return to_low + (value - from_low) * (to_high - to_low) / (from_high - from_low)


@dataclass
class LinearConverter:
    """Converts a raw value as ``value * scale + offset``."""

    offset: float = 0.0
    scale: float = 1.0

    def convert(self, value: int | float) -> float:
        return float(value) * self.scale + self.offset


@dataclass
class Converter:
    """Set of converters for all measured quantities."""

    position: LinearConverter = field(default_factory=LinearConverter)
    current: LinearConverter = field(default_factory=LinearConverter)
    temp: LinearConverter = field(default_factory=LinearConverter)
    vcc: LinearConverter = field(default_factory=LinearConverter)

    def set_position_cfg(
        self, low_value: int, low_angle: float, high_value: int, high_angle: float
    ) -> None:
        """Configure position so that raw low/high values map onto the given angles."""
        val_diff = int(high_value) - int(low_value)
        if val_diff == 0:
            raise ValueError("low and high position values must differ")
        self.position.scale = (high_angle - low_angle) / val_diff
        self.position.offset = low_angle - float(low_value) * self.position.scale

    def set_current_cfg(self, scale: float, offset: float) -> None:
        self.current.offset = offset
        self.current.scale = scale

    def set_temp_cfg(self, scale: float, offset: float) -> None:
        self.temp.offset = offset
        self.temp.scale = scale

    def set_vcc_cfg(self, scale: float) -> None:
        self.vcc.scale = scale


@dataclass(frozen=True)
class OffScale:
    """Offset and scale of a linear conversion."""

    offset: float
    scale: float


def calc_current_conversion(
    v_max: float, v_min: float, steps: float, r_shunt: float, gain: float
) -> OffScale:
    """Shunt current conversion where the amplifier gain applies to both terms."""
    return OffScale(
        offset=v_min / (r_shunt * gain),
        scale=(v_max - v_min) / (steps * r_shunt * gain),
    )


def calculate_current_conversion(
    v_max: float, v_min: float, steps: float, r_shunt: float, gain: float
) -> OffScale:
    """Shunt current conversion where the offset ignores the amplifier gain."""
    return OffScale(
        offset=v_min / r_shunt,
        scale=(v_max - v_min) / (steps * r_shunt * gain),
    )


def current(conv: Converter, raw_current: int, motor: MotorInfo) -> float:
    """Convert a raw current reading, signed by the motor direction."""
    return conv.current.convert(raw_current) * float(motor.direction)


def position(conv: Converter, pos_drv: PositionSource) -> float:
    """Convert the position reported by ``pos_drv``."""
    return conv.position.convert(pos_drv.position)