"""Persistent storage of the configuration in flash-like pages."""

from __future__ import annotations

import struct
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Optional

from .config import (
    GIT_DATE_SIZE,
    GIT_VER_SIZE,
    ConfigMap,
    Key,
    KeyVal,
    Payload,
    _decode_str,
    _encode_str,
    make_keyval,
)

Page = bytearray

_CHECKSUM_SIZE = 4
_RECORD_HEAD = struct.Struct("<HI")
_HEADER = struct.Struct(f"<{GIT_VER_SIZE}s{GIT_DATE_SIZE}sII")
_KEY = struct.Struct("<I")


class StorageError(Exception):
    """Raised when a configuration cannot be stored."""


class _LoadResult(Enum):
    SUCCESS = "success"
    DESERIALIZATION_ERROR = "deserialization_error"
    CHECKSUM_ERROR = "checksum_error"


class _DeserializationError(Exception):
    pass


class _ChecksumError(Exception):
    pass


def checksum(data: bytes) -> int:
    """XOR all 4-byte chunks of ``data`` into a buffer seeded with 0xAA bytes."""
    buffer = bytearray(b"\xaa" * _CHECKSUM_SIZE)
    for start in range(0, len(data), _CHECKSUM_SIZE):
        for i, b in enumerate(data[start : start + _CHECKSUM_SIZE]):
            buffer[i] ^= b
    return int.from_bytes(buffer, "little")


def _record(data: bytes) -> bytes:
    return _RECORD_HEAD.pack(len(data), checksum(data)) + data


def _read_record(view: bytes, offset: int) -> tuple[bytes, int]:
    if offset + _RECORD_HEAD.size > len(view):
        raise _DeserializationError
    size, expected = _RECORD_HEAD.unpack_from(view, offset)
    start = offset + _RECORD_HEAD.size
    end = start + size
    if size == 0 or end > len(view):
        raise _DeserializationError
    data = view[start:end]
    if checksum(data) != expected:
        raise _ChecksumError
    return data, end


def _encode_header(payload: Payload, count: int) -> bytes:
    return _HEADER.pack(
        _encode_str(payload.git_ver, GIT_VER_SIZE),
        _encode_str(payload.git_date, GIT_DATE_SIZE),
        payload.id,
        count,
    )


def _decode_header(data: bytes) -> tuple[Payload, int]:
    if len(data) != _HEADER.size:
        raise _DeserializationError
    ver, date, pid, count = _HEADER.unpack(data)
    try:
        return Payload(_decode_str(ver), _decode_str(date), pid), count
    except (UnicodeDecodeError, ValueError) as err:
        raise _DeserializationError from err


def _decode_keyval(data: bytes) -> KeyVal:
    if len(data) < _KEY.size:
        raise _DeserializationError
    (raw,) = _KEY.unpack_from(data)
    try:
        key = Key(raw)
    except ValueError as err:
        raise _DeserializationError from err
    return KeyVal(key=key, msg=data[_KEY.size :])


def _load(
    page: bytes,
    payload_cb: Callable[[Payload], bool],
    keyval_cb: Callable[[KeyVal], bool],
) -> _LoadResult:
    view = bytes(page)
    try:
        data, offset = _read_record(view, 0)
        payload, count = _decode_header(data)
        if not payload_cb(payload):
            return _LoadResult.SUCCESS
        for _ in range(count):
            data, offset = _read_record(view, offset)
            if not keyval_cb(_decode_keyval(data)):
                return _LoadResult.DESERIALIZATION_ERROR
    except _DeserializationError:
        return _LoadResult.DESERIALIZATION_ERROR
    except _ChecksumError:
        return _LoadResult.CHECKSUM_ERROR
    return _LoadResult.SUCCESS


def _read_payload(page: bytes) -> Optional[Payload]:
    found: list[Payload] = []

    def on_payload(pl: Payload) -> bool:
        found.append(pl)
        return False

    _load(page, on_payload, lambda kv: True)
    return found[0] if found else None


def _find_cmp_page(
    pages: Sequence[Page], better: Callable[[int, int], bool]
) -> Optional[Page]:
    candidate: Optional[Page] = None
    candidate_id = 0
    for p in pages:
        pl = _read_payload(p)
        if pl is None:
            continue
        if candidate is None or better(candidate_id, pl.id):
            candidate = p
            candidate_id = pl.id
    return candidate


def find_unused_page(pages: Sequence[Page]) -> Optional[Page]:
    """Return the first page that holds no stored configuration."""
    for p in pages:
        result = _load(p, lambda pl: False, lambda kv: True)
        if result is _LoadResult.DESERIALIZATION_ERROR:
            return p
    return None


def find_oldest_page(pages: Sequence[Page]) -> Optional[Page]:
    """Return the page with the lowest stored id, or None if none holds data."""
    return _find_cmp_page(pages, lambda cand, pid: pid < cand)


def find_next_page(pages: Sequence[Page]) -> Optional[Page]:
    """Return the page to write next: an unused one, else the oldest."""
    res = find_unused_page(pages)
    if res is not None:
        return res
    return find_oldest_page(pages)


def find_latest_page(pages: Sequence[Page]) -> Optional[Page]:
    """Return the page with the highest stored id, or None if none holds data."""
    return _find_cmp_page(pages, lambda cand, pid: pid > cand)


def store(payload: Payload, cfg_map: Optional[ConfigMap], page: Page) -> bytes:
    """Write ``payload`` and all registers of ``cfg_map`` into ``page``.

    With ``cfg_map`` of None only the payload is written. Returns the bytes
    written; raises StorageError if they do not fit into the page.
    """
    keyvals = [] if cfg_map is None else [make_keyval(k, v) for k, v in cfg_map.items()]
    out = bytearray(_record(_encode_header(payload, len(keyvals))))
    for kv in keyvals:
        out += _record(_KEY.pack(int(kv.key)) + kv.msg)
    if len(out) > len(page):
        raise StorageError(f"configuration needs {len(out)} bytes, page has {len(page)}")
    page[: len(out)] = out
    return bytes(out)


def load(
    page: bytes, payload_cb: Callable[[Payload], bool], cfg_map: ConfigMap
) -> bool:
    """Load registers stored in ``page`` into ``cfg_map``.

    ``payload_cb`` receives the stored payload and returns whether the values
    should be loaded. Returns True if the page was read successfully.
    """

    def on_keyval(kv: KeyVal) -> bool:
        try:
            cfg_map.insert(kv.key, kv.msg)
        except ValueError:
            return False
        return True

    return _load(page, payload_cb, on_keyval) is _LoadResult.SUCCESS