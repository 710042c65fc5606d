"""Text command interface of the servo: parsing and handling of statements."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Protocol, Union

from . import cnv
from .base import ControlMode
from .cfg_dispatcher import ConfigDispatcher
from .cnv import Converter
from .config import MODEL_NAME_SIZE, ConfigMap, EncoderMode, Key, Payload, value_type
from .control import FLOAT_MAX, Control
from .fmt import ArrayWriter, JsonWriter
from .map_cfg import cfg_key_for
from .storage import StorageError, store

_UINT32_MAX = 0xFFFF_FFFF
_KEYVAL_SIZE = 40
_STORE_BUFFER_SIZE = len(Key) * _KEYVAL_SIZE + 128

PROPERTIES = ("mode", "current", "vcc", "temp", "position", "velocity")

_ENCODER_NAMES = {"analog": EncoderMode.ANALOG, "quad": EncoderMode.QUAD}
_ENCODER_TEXT = {mode: name for name, mode in _ENCODER_NAMES.items()}


class ParseError(ValueError):
    """Raised when a statement cannot be parsed."""


class Storage(Protocol):
    def store_page(self, data: bytes) -> None: ...


@dataclass(frozen=True)
class ModeStmt:
    mode: ControlMode
    value: float = 0.0


@dataclass(frozen=True)
class PropStmt:
    prop: str


@dataclass(frozen=True)
class CfgSetStmt:
    key: Key
    value: object


@dataclass(frozen=True)
class CfgGetStmt:
    key: Key


@dataclass(frozen=True)
class CfgCommitStmt:
    pass


@dataclass(frozen=True)
class CfgClearStmt:
    pass


@dataclass(frozen=True)
class InfoStmt:
    pass


Statement = Union[
    ModeStmt, PropStmt, CfgSetStmt, CfgGetStmt, CfgCommitStmt, CfgClearStmt, InfoStmt
]


def _parse_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise ParseError(f"not a number: {text!r}") from None
    if math.isfinite(value) and abs(value) > FLOAT_MAX:
        raise ParseError(f"number out of range: {text!r}")
    return value


def _parse_value(key: Key, text: str) -> object:
    kind = value_type(key)
    if kind is float:
        return _parse_float(text)
    if kind is bool:
        if text not in ("true", "false"):
            raise ParseError(f"not a bool: {text!r}")
        return text == "true"
    if kind is EncoderMode:
        try:
            return _ENCODER_NAMES[text]
        except KeyError:
            raise ParseError(f"unknown encoder mode: {text!r}") from None
    if kind is int:
        try:
            value = int(text)
        except ValueError:
            raise ParseError(f"not an integer: {text!r}") from None
        if not 0 <= value <= _UINT32_MAX:
            raise ParseError(f"integer out of range: {text!r}")
        return value
    if len(text) >= 2 and text[0] == text[-1] == '"':
        text = text[1:-1]
    if len(text.encode()) > MODEL_NAME_SIZE:
        raise ParseError(f"string too long: {text!r}")
    return text


def _cfg_key(name: str) -> Key:
    try:
        return cfg_key_for(name)
    except KeyError:
        raise ParseError(f"unknown configuration field: {name!r}") from None


def _parse_mode(args: list[str]) -> ModeStmt:
    if not args:
        raise ParseError("missing mode")
    try:
        mode = ControlMode(args[0])
    except ValueError:
        raise ParseError(f"unknown mode: {args[0]!r}") from None
    if mode is ControlMode.DISENGAGED:
        if len(args) != 1:
            raise ParseError("disengaged mode takes no value")
        return ModeStmt(mode)
    if len(args) != 2:
        raise ParseError(f"mode {mode.value} needs exactly one value")
    return ModeStmt(mode, _parse_float(args[1]))


def _parse_cfg(text: str) -> Statement:
    parts = text.split(None, 3)
    sub = parts[1] if len(parts) > 1 else ""
    if sub == "commit" and len(parts) == 2:
        return CfgCommitStmt()
    if sub == "clear" and len(parts) == 2:
        return CfgClearStmt()
    if sub == "get" and len(parts) == 3:
        return CfgGetStmt(_cfg_key(parts[2]))
    if sub == "set" and len(parts) == 4:
        key = _cfg_key(parts[2])
        return CfgSetStmt(key, _parse_value(key, parts[3].strip()))
    raise ParseError(f"invalid cfg statement: {text!r}")


def parse_statement(text: str) -> Statement:
    """Parse one command line into a statement; raises ParseError if invalid."""
    tokens = text.split()
    if not tokens:
        raise ParseError("empty statement")
    head, args = tokens[0], tokens[1:]
    if head == "mode":
        return _parse_mode(args)
    if head == "prop":
        if len(args) != 1 or args[0] not in PROPERTIES:
            raise ParseError(f"invalid property statement: {text!r}")
        return PropStmt(args[0])
    if head == "info":
        if args:
            raise ParseError("info takes no arguments")
        return InfoStmt()
    if head == "cfg":
        return _parse_cfg(text)
    raise ParseError(f"unknown statement: {head!r}")


@dataclass
class Dispatcher:
    """Everything a statement may read or change."""

    motor: Any
    pos_drv: Any
    curr_drv: Any
    vcc_drv: Any
    temp_drv: Any
    ctl: Control
    met: Any
    mon: Any
    cfg_map: ConfigMap
    cfg_pl: Payload
    stor_drv: Storage
    conv: Converter
    now: int = 0
    version: str = ""
    commit: str = ""
    commit_date: str = ""

    def config_dispatcher(self) -> ConfigDispatcher:
        return ConfigDispatcher(
            cfg_map=self.cfg_map,
            ctl=self.ctl,
            conv=self.conv,
            met=self.met,
            mon=self.mon,
            motor=self.motor,
            pos=self.pos_drv,
        )


def _store_persistent_config(dis: Dispatcher, cfg_map: ConfigMap | None) -> bool:
    pld = Payload(
        git_ver=dis.version,
        git_date=dis.commit_date,
        id=(dis.cfg_pl.id + 1) & _UINT32_MAX,
    )
    try:
        used = store(pld, cfg_map, bytearray(_STORE_BUFFER_SIZE))
        dis.stor_drv.store_page(used)
    except StorageError:
        return False
    dis.cfg_pl = pld
    return True


def _set_mode(dis: Dispatcher, stmt: ModeStmt) -> None:
    ctl = dis.ctl
    if stmt.mode is ControlMode.DISENGAGED:
        ctl.disengage()
    elif stmt.mode is ControlMode.POWER:
        ctl.switch_to_power_control(stmt.value)
    elif stmt.mode is ControlMode.CURRENT:
        ctl.switch_to_current_control(dis.now, stmt.value)
    elif stmt.mode is ControlMode.VELOCITY:
        ctl.switch_to_velocity_control(dis.now, stmt.value)
    else:
        ctl.switch_to_position_control(dis.now, stmt.value)


def _property(dis: Dispatcher, prop: str) -> object:
    if prop == "mode":
        return dis.ctl.mode().value
    if prop == "current":
        return cnv.current(dis.conv, dis.curr_drv.current, dis.motor)
    if prop == "vcc":
        return dis.conv.vcc.convert(dis.vcc_drv.vcc)
    if prop == "temp":
        return dis.conv.temp.convert(dis.temp_drv.temperature)
    if prop == "position":
        return cnv.position(dis.conv, dis.pos_drv)
    return float(dis.met.velocity)


def _handle(dis: Dispatcher, stmt: Statement, out: JsonWriter) -> None:
    with ArrayWriter(out) as arr:
        if isinstance(stmt, ModeStmt):
            _set_mode(dis, stmt)
            arr("OK")
        elif isinstance(stmt, PropStmt):
            arr("OK")
            arr(_property(dis, stmt.prop))
        elif isinstance(stmt, CfgSetStmt):
            arr("OK")
            dis.config_dispatcher().set(stmt.key, stmt.value)
        elif isinstance(stmt, CfgGetStmt):
            arr("OK")
            value = dis.cfg_map.get(stmt.key)
            if stmt.key is Key.ENCODER_MODE:
                arr(_ENCODER_TEXT[value])
            else:
                arr(value)
        elif isinstance(stmt, (CfgCommitStmt, CfgClearStmt)):
            cfg_map = dis.cfg_map if isinstance(stmt, CfgCommitStmt) else None
            arr("OK" if _store_persistent_config(dis, cfg_map) else "NOK")
        else:
            arr("OK")
            with arr.object() as obj:
                obj("version", dis.version)
                obj("commit", dis.commit)


def handle_message(dispatcher: Dispatcher, data: bytes, capacity: int) -> tuple[bool, bytes]:
    """Handle one command and return whether it parsed, with the JSON reply.

    The reply is cut to at most ``capacity`` bytes.
    """
    out = JsonWriter(capacity)
    try:
        stmt = parse_statement(bytes(data).decode())
    except (ParseError, UnicodeDecodeError):
        with ArrayWriter(out) as arr:
            arr("NOK")
            arr("parse error")
        return False, out.getvalue()
    _handle(dispatcher, stmt, out)
    return True, out.getvalue()