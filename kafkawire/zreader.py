"""A zero-copy style reader over a byte buffer in Kafka wire format."""

from __future__ import annotations

import struct
from typing import Callable, TypeVar

from kafkawire.errors import StringDecodeError, UnexpectedEOFError

T = TypeVar("T")

_I8 = struct.Struct(">b")
_I16 = struct.Struct(">h")
_I32 = struct.Struct(">i")
_I64 = struct.Struct(">q")


class ZReader:
    """Consumes big-endian protocol values from the front of a byte buffer."""

    __slots__ = ("_data", "_pos")

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = bytes(data)
        self._pos = 0

    def read(self, n_bytes: int) -> bytes:
        """Consume exactly ``n_bytes``; on failure the reader does not advance."""
        end = self._pos + n_bytes
        if n_bytes < 0 or end > len(self._data):
            raise UnexpectedEOFError(
                f"wanted {n_bytes} bytes, {len(self._data) - self._pos} available"
            )
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def rest(self) -> bytes:
        """Return the unconsumed bytes without advancing."""
        return self._data[self._pos:]

    def is_empty(self) -> bool:
        """Whether all bytes have been consumed."""
        return self._pos >= len(self._data)

    def _unpack(self, fmt: struct.Struct) -> int:
        return fmt.unpack(self.read(fmt.size))[0]

    def read_i8(self) -> int:
        return self._unpack(_I8)

    def read_i16(self) -> int:
        return self._unpack(_I16)

    def read_i32(self) -> int:
        return self._unpack(_I32)

    def read_i64(self) -> int:
        return self._unpack(_I64)

    def read_str(self) -> str:
        """Read a protocol string; the null string is returned as ``""``."""
        length = self.read_i16()
        if length <= 0:
            return ""
        raw = self.read(length)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise StringDecodeError(str(exc)) from exc

    def read_bytes(self) -> bytes:
        """Read protocol bytes; null bytes are returned as ``b""``."""
        length = self.read_i32()
        if length <= 0:
            return b""
        return self.read(length)

    def read_array_len(self) -> int:
        """Read an array length; a null array has length zero."""
        length = self.read_i32()
        return max(length, 0)

    def read_array(self, parse_elem: Callable[["ZReader"], T]) -> list[T]:
        """Read an array, parsing each element with ``parse_elem(reader)``."""
        return [parse_elem(self) for _ in range(self.read_array_len())]