from datetime import timedelta

import pytest

from kafkawire.errors import InvalidDurationError
from kafkawire.wire import (
    API_KEY_METADATA,
    API_VERSION,
    Encoder,
    HeaderRequest,
    HeaderResponse,
    to_crc,
    to_millis_i32,
)
from kafkawire.zreader import ZReader
from kafkawire.errors import UnexpectedEOFError

I32_MAX = 2**31 - 1
U32_MAX = 2**32 - 1


def test_to_millis_valid():
    assert to_millis_i32(timedelta(milliseconds=1_234)) == 1_234
    assert to_millis_i32(timedelta(seconds=540, microseconds=123_456)) == 540_123
    assert to_millis_i32(timedelta(milliseconds=I32_MAX - 1)) == I32_MAX - 1


@pytest.mark.parametrize(
    "duration",
    [
        timedelta.max,
        timedelta(milliseconds=U32_MAX),
        timedelta(milliseconds=I32_MAX + 1),
        timedelta(milliseconds=-1),
    ],
)
def test_to_millis_invalid(duration):
    with pytest.raises(InvalidDurationError):
        to_millis_i32(duration)


def test_crc_check_value():
    assert to_crc(b"123456789") == 0xCBF43926
    assert to_crc(b"") == 0


def test_crc_detects_change():
    assert to_crc(b"hello") != to_crc(b"hellp")


def test_write_str_wire_bytes():
    enc = Encoder()
    enc.write_str("hello")
    assert enc.getvalue() == bytes([0, 5]) + b"hello"


def test_write_i32_wire_bytes():
    enc = Encoder()
    enc.write_i32(16909060)
    assert enc.getvalue() == bytes([1, 2, 3, 4])


def test_null_bytes_and_string():
    enc = Encoder()
    enc.write_bytes(None)
    enc.write_str(None)
    assert enc.getvalue() == bytes([0xFF] * 6)
    r = ZReader(enc.getvalue())
    assert r.read_bytes() == b""
    assert r.read_str() == ""


def test_scalar_round_trip():
    enc = Encoder()
    enc.write_i8(-3)
    enc.write_i16(-300)
    enc.write_i32(-70000)
    enc.write_i64(72623859790382856)
    enc.write_bytes(b"\x00\x01")
    enc.write_str("h\u00e9")
    r = ZReader(enc.getvalue())
    assert r.read_i8() == -3
    assert r.read_i16() == -300
    assert r.read_i32() == -70000
    assert r.read_i64() == 72623859790382856
    assert r.read_bytes() == b"\x00\x01"
    assert r.read_str() == "h\u00e9"
    assert r.is_empty()


def test_array_round_trip():
    enc = Encoder()
    enc.write_array(["a", "bc"], Encoder.write_str)
    r = ZReader(enc.getvalue())
    assert r.read_array(ZReader.read_str) == ["a", "bc"]
    assert r.is_empty()


def test_header_request_round_trip():
    header = HeaderRequest(API_KEY_METADATA, API_VERSION, 42, "test")
    enc = Encoder()
    header.encode(enc)
    r = ZReader(enc.getvalue())
    assert r.read_i16() == API_KEY_METADATA
    assert r.read_i16() == API_VERSION
    assert r.read_i32() == 42
    assert r.read_str() == "test"
    assert r.is_empty()


def test_header_response_decode():
    enc = Encoder()
    enc.write_i32(-3)
    assert HeaderResponse.decode(ZReader(enc.getvalue())) == HeaderResponse(correlation=-3)


def test_header_response_truncated():
    with pytest.raises(UnexpectedEOFError):
        HeaderResponse.decode(ZReader(bytes([0, 1])))