"""Minimal bounded JSON writer used for replies."""

from __future__ import annotations


class JsonWriter:
    """Writes JSON values into a buffer of fixed capacity.

    Output that does not fit is silently dropped.
    """

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._buf = bytearray()

    @property
    def _remaining(self) -> int:
        return self._capacity - len(self._buf)

    def add(self, c: str | bytes) -> None:
        """Append a single character if there is room."""
        data = c.encode() if isinstance(c, str) else bytes(c)
        for b in data:
            if len(self._buf) < self._capacity:
                self._buf.append(b)

    def _copy(self, text: str) -> None:
        self.add(text.encode())

    def _formatted(self, text: str) -> None:
        data = text.encode()
        remaining = self._remaining
        if remaining <= 0:
            return
        if len(data) >= remaining:
            # Truncated output ends with a terminating zero byte.
            self._buf += data[: remaining - 1] + b"\x00"
        else:
            self._buf += data

    def value(self, v: object) -> JsonWriter:
        """Write one JSON scalar: a string, bool, unsigned int or float."""
        if isinstance(v, bool):
            self._copy("true" if v else "false")
        elif isinstance(v, str):
            self.add('"')
            self._copy(v)
            self.add('"')
        elif isinstance(v, int):
            if v < 0:
                raise ValueError(f"only unsigned integers are supported, got {v}")
            self._formatted("%u" % v)
        elif isinstance(v, float):
            self._formatted("%f" % v)
        else:
            raise TypeError(f"unsupported value type: {type(v).__name__}")
        return self

    def getvalue(self) -> bytes:
        """Return the bytes written so far."""
        return bytes(self._buf)


class ArrayWriter:
    """Writes a JSON array; opened on creation, closed on leaving the context."""

    def __init__(self, writer: JsonWriter) -> None:
        self.writer = writer
        self._delim = ""
        writer.add("[")

    def _delimit(self) -> None:
        if self._delim:
            self.writer.add(self._delim)
        self._delim = ","

    def __call__(self, value: object) -> ArrayWriter:
        self._delimit()
        self.writer.value(value)
        return self

    def object(self) -> ObjectWriter:
        """Start a nested object as the next element."""
        self._delimit()
        return ObjectWriter(self.writer)

    def __enter__(self) -> ArrayWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.writer.add("]")


class ObjectWriter:
    """Writes a JSON object; opened on creation, closed on leaving the context."""

    def __init__(self, writer: JsonWriter) -> None:
        self.writer = writer
        self._delim = ""
        writer.add("{")

    def __call__(self, key: str, value: object) -> ObjectWriter:
        if self._delim:
            self.writer.add(self._delim)
        self.writer.value(key)
        self.writer.add(":")
        self.writer.value(value)
        self._delim = ","
        return self

    def __enter__(self) -> ObjectWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.writer.add("}")