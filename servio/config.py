"""Configuration registers of the servo and their binary encoding."""

from __future__ import annotations

import struct
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import IntEnum

from .base import PIPI

MODEL_NAME_SIZE = 32
GIT_VER_SIZE = 16
GIT_DATE_SIZE = 32

_UINT32_MAX = 0xFFFF_FFFF


class Key(IntEnum):
    """Identifiers of configuration registers."""

    MODEL = 1
    ID = 2
    GROUP_ID = 3
    ENCODER_MODE = 4
    POSITION_LOW_ANGLE = 11
    POSITION_HIGH_ANGLE = 12
    CURRENT_CONV_SCALE = 14
    CURRENT_CONV_OFFSET = 15
    TEMP_CONV_SCALE = 16
    TEMP_CONV_OFFSET = 17
    VOLTAGE_CONV_SCALE = 18
    INVERT_HBRIDGE = 19
    CURRENT_LOOP_P = 30
    CURRENT_LOOP_I = 31
    CURRENT_LOOP_D = 32
    CURRENT_LIM_MIN = 33
    CURRENT_LIM_MAX = 34
    VELOCITY_LOOP_P = 40
    VELOCITY_LOOP_I = 41
    VELOCITY_LOOP_D = 42
    VELOCITY_LIM_MIN = 43
    VELOCITY_LIM_MAX = 44
    VELOCITY_TO_CURR_LIM_SCALE = 45
    POSITION_LOOP_P = 50
    POSITION_LOOP_I = 51
    POSITION_LOOP_D = 52
    POSITION_LIM_MIN = 53
    POSITION_LIM_MAX = 54
    POSITION_TO_VEL_LIM_SCALE = 55
    STATIC_FRICTION_SCALE = 60
    STATIC_FRICTION_DECAY = 61
    MINIMUM_VOLTAGE = 62
    MAXIMUM_TEMPERATURE = 65
    MOVING_DETECTION_STEP = 66
    QUAD_ENCD_RANGE = 80


class EncoderMode(IntEnum):
    """Source of the position measurement."""

    ANALOG = 1
    QUAD = 2


_NON_FLOAT_TYPES: dict[Key, type] = {
    Key.MODEL: str,
    Key.ID: int,
    Key.GROUP_ID: int,
    Key.ENCODER_MODE: EncoderMode,
    Key.INVERT_HBRIDGE: bool,
    Key.QUAD_ENCD_RANGE: int,
}


def value_type(key: Key | int) -> type:
    """Return the Python type of the value held by register ``key``."""
    return _NON_FLOAT_TYPES.get(Key(key), float)


def _to_f32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError as err:
        raise ValueError(f"value {value} does not fit a 32-bit float") from err


def _encode_str(text: str, size: int) -> bytes:
    data = text.encode()
    if len(data) > size:
        raise ValueError(f"string {text!r} is longer than {size} bytes")
    return data.ljust(size, b"\x00")


def _decode_str(data: bytes) -> str:
    return data.split(b"\x00", 1)[0].decode()


def _check_uint32(value: int) -> int:
    if not 0 <= value <= _UINT32_MAX:
        raise ValueError(f"value {value} is out of the unsigned 32-bit range")
    return value


def _coerce(key: Key, value: object) -> object:
    kind = value_type(key)
    if kind is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"{key.name} expects a number, got {value!r}")
        return _to_f32(float(value))
    if kind is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{key.name} expects an integer, got {value!r}")
        return _check_uint32(value)
    if kind is bool:
        if not isinstance(value, bool):
            raise TypeError(f"{key.name} expects a bool, got {value!r}")
        return value
    if kind is EncoderMode:
        return EncoderMode(value)
    if not isinstance(value, str):
        raise TypeError(f"{key.name} expects a string, got {value!r}")
    _encode_str(value, MODEL_NAME_SIZE)
    return value


def _encode(key: Key, value: object) -> bytes:
    kind = value_type(key)
    if kind is float:
        return struct.pack("<f", value)
    if kind is int:
        return struct.pack("<I", value)
    if kind is bool:
        return b"\x01" if value else b"\x00"
    if kind is EncoderMode:
        return struct.pack("<B", int(value))
    return _encode_str(value, MODEL_NAME_SIZE)


def _decode(key: Key, data: bytes) -> object:
    kind = value_type(key)
    try:
        if kind is float:
            return struct.unpack("<f", data)[0]
        if kind is int:
            return struct.unpack("<I", data)[0]
        if kind is bool:
            if data not in (b"\x00", b"\x01"):
                raise ValueError(f"invalid bool encoding {data!r}")
            return data == b"\x01"
        if kind is EncoderMode:
            (raw,) = struct.unpack("<B", data)
            return EncoderMode(raw)
        if len(data) != MODEL_NAME_SIZE:
            raise ValueError(f"model name must be {MODEL_NAME_SIZE} bytes")
        return _decode_str(data)
    except (struct.error, UnicodeDecodeError) as err:
        raise ValueError(f"cannot decode {key.name}: {err}") from err


@dataclass
class Payload:
    """Metadata stored together with a persisted configuration."""

    git_ver: str = ""
    git_date: str = ""
    id: int = 0

    def __post_init__(self) -> None:
        _encode_str(self.git_ver, GIT_VER_SIZE)
        _encode_str(self.git_date, GIT_DATE_SIZE)
        _check_uint32(self.id)


@dataclass(frozen=True)
class KeyVal:
    """A register key with its serialized value."""

    key: Key
    msg: bytes


def make_keyval(key: Key | int, value: object) -> KeyVal:
    """Serialize ``value`` for register ``key``."""
    k = Key(key)
    return KeyVal(key=k, msg=_encode(k, _coerce(k, value)))


class ConfigMap:
    """Typed set of all configuration registers."""

    def __init__(self, values: Mapping[Key | int, object]) -> None:
        given = {Key(k): v for k, v in values.items()}
        missing = [k.name for k in Key if k not in given]
        if missing:
            raise KeyError(f"missing registers: {', '.join(missing)}")
        self._values: dict[Key, object] = {k: _coerce(k, given[k]) for k in Key}

    def get(self, key: Key | int) -> object:
        """Return the value of register ``key``."""
        return self._values[Key(key)]

    def set(self, key: Key | int, value: object) -> None:
        """Set register ``key``; the value is checked and stored in register precision."""
        k = Key(key)
        self._values[k] = _coerce(k, value)

    def serialize(self, key: Key | int) -> bytes:
        """Return the little-endian encoding of register ``key``."""
        k = Key(key)
        return _encode(k, self._values[k])

    def insert(self, key: Key | int, data: bytes) -> None:
        """Decode ``data`` and store it into register ``key``; raises ValueError if invalid."""
        k = Key(key)
        self._values[k] = _decode(k, bytes(data))

    def items(self) -> Iterator[tuple[Key, object]]:
        """Iterate registers in key order."""
        return iter(list(self._values.items()))

    def copy(self) -> ConfigMap:
        return ConfigMap(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigMap):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        body = ", ".join(f"{k.name}={v!r}" for k, v in self._values.items())
        return f"ConfigMap({body})"


def default_config() -> ConfigMap:
    """Return the factory default configuration."""
    return ConfigMap(
        {
            Key.MODEL: "no model",
            Key.ID: 0,
            Key.GROUP_ID: 0,
            Key.ENCODER_MODE: EncoderMode.ANALOG,
            Key.POSITION_LOW_ANGLE: 0.0,
            Key.POSITION_HIGH_ANGLE: PIPI,
            Key.CURRENT_CONV_SCALE: 1.0,
            Key.CURRENT_CONV_OFFSET: 0.0,
            Key.TEMP_CONV_SCALE: 1.0,
            Key.TEMP_CONV_OFFSET: 0.0,
            Key.VOLTAGE_CONV_SCALE: 1.0,
            Key.INVERT_HBRIDGE: False,
            Key.CURRENT_LOOP_P: 0.03125,
            Key.CURRENT_LOOP_I: 0.000006,
            Key.CURRENT_LOOP_D: 0.0,
            Key.CURRENT_LIM_MIN: -2.0,
            Key.CURRENT_LIM_MAX: 2.0,
            Key.VELOCITY_LOOP_P: 0.02,
            Key.VELOCITY_LOOP_I: 0.0000002,
            Key.VELOCITY_LOOP_D: 0.02,
            Key.VELOCITY_LIM_MIN: -3.0,
            Key.VELOCITY_LIM_MAX: 3.0,
            Key.VELOCITY_TO_CURR_LIM_SCALE: 2.0,
            Key.POSITION_LOOP_P: 0.2,
            Key.POSITION_LOOP_I: 0.00000002,
            Key.POSITION_LOOP_D: 0.0,
            Key.POSITION_LIM_MIN: 0.1,
            Key.POSITION_LIM_MAX: PIPI - 0.1,
            Key.POSITION_TO_VEL_LIM_SCALE: 2.0,
            Key.STATIC_FRICTION_SCALE: 3.0,
            Key.STATIC_FRICTION_DECAY: 1.0,
            Key.MINIMUM_VOLTAGE: 6.0,
            Key.MAXIMUM_TEMPERATURE: 80.0,
            Key.MOVING_DETECTION_STEP: 0.05,
            Key.QUAD_ENCD_RANGE: 2048,
        }
    )