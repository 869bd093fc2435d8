"""Shared pieces of the Kafka wire protocol: encoding, headers, CRC, durations."""

from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Iterable, TypeVar

from kafkawire.errors import InvalidDurationError
from kafkawire.zreader import ZReader

T = TypeVar("T")

API_KEY_PRODUCE = 0
API_KEY_FETCH = 1
API_KEY_OFFSET = 2
API_KEY_METADATA = 3
# 4-7 are reserved for non-public broker services
API_KEY_OFFSET_COMMIT = 8
API_KEY_OFFSET_FETCH = 9
API_KEY_GROUP_COORDINATOR = 10

API_VERSION = 0

I32_MAX = 2**31 - 1

_I8 = struct.Struct(">b")
_I16 = struct.Struct(">h")
_I32 = struct.Struct(">i")
_I64 = struct.Struct(">q")


class Encoder:
    """Accumulates big-endian protocol values into a byte buffer."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def __len__(self) -> int:
        return len(self._buf)

    def write_i8(self, value: int) -> None:
        self._buf += _I8.pack(value)

    def write_i16(self, value: int) -> None:
        self._buf += _I16.pack(value)

    def write_i32(self, value: int) -> None:
        self._buf += _I32.pack(value)

    def write_i64(self, value: int) -> None:
        self._buf += _I64.pack(value)

    def write_str(self, value: str | None) -> None:
        """Write a protocol string; ``None`` is written as the null string."""
        if value is None:
            self.write_i16(-1)
            return
        raw = value.encode("utf-8")
        self.write_i16(len(raw))
        self._buf += raw

    def write_bytes(self, value: bytes | None) -> None:
        """Write protocol bytes; ``None`` is written as null bytes."""
        if value is None:
            self.write_i32(-1)
            return
        self.write_i32(len(value))
        self._buf += value

    def write_array(
        self, items: Iterable[T], encode_item: Callable[["Encoder", T], Any]
    ) -> None:
        """Write a length-prefixed array, each element via ``encode_item(encoder, item)``."""
        items = list(items)
        self.write_i32(len(items))
        for item in items:
            encode_item(self, item)

    def getvalue(self) -> bytes:
        return bytes(self._buf)


@dataclass
class HeaderRequest:
    """The header that precedes every request."""

    api_key: int
    api_version: int
    correlation_id: int
    client_id: str

    def encode(self, out: Encoder) -> None:
        out.write_i16(self.api_key)
        out.write_i16(self.api_version)
        out.write_i32(self.correlation_id)
        out.write_str(self.client_id)


@dataclass
class HeaderResponse:
    """The header that precedes every response."""

    correlation: int = 0

    @classmethod
    def decode(cls, reader: ZReader) -> "HeaderResponse":
        return cls(correlation=reader.read_i32())


def to_crc(data: bytes) -> int:
    """The CRC-32 (ISO-HDLC) checksum of ``data`` as an unsigned integer."""
    return zlib.crc32(data) & 0xFFFFFFFF


def to_millis_i32(duration: timedelta) -> int:
    """Whole milliseconds of ``duration``, checked to fit a signed 32-bit field."""
    if duration < timedelta(0):
        raise InvalidDurationError(f"negative duration: {duration}")
    millis = (duration.days * 86_400 + duration.seconds) * 1_000 + duration.microseconds // 1_000
    if millis > I32_MAX:
        raise InvalidDurationError(f"duration too long: {duration}")
    return millis