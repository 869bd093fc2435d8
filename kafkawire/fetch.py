"""Parsing of fetch responses: the messages delivered for topic partitions."""

from __future__ import annotations

import gzip
from dataclasses import dataclass, field

from kafkawire.errors import (
    KafkaCode,
    KafkaError,
    UnexpectedEOFError,
    UnsupportedCompressionError,
    UnsupportedProtocolError,
    error_from_protocol,
)
from kafkawire.fetch_request import FetchRequest, TopicPartitionFetchRequest
from kafkawire.wire import to_crc
from kafkawire.zreader import ZReader

_COMPRESSION_MASK = 0x07
_COMPRESSION_NONE = 0
_COMPRESSION_GZIP = 1


@dataclass(frozen=True)
class Message:
    """A fetched message; an absent key or value is delivered as ``b""``."""

    offset: int
    key: bytes
    value: bytes


@dataclass
class Data:
    """The successfully fetched payload of one partition."""

    highwatermark_offset: int
    messages: list[Message] = field(default_factory=list)


@dataclass
class Partition:
    """The fetch result of one partition: its data or the error the broker reported."""

    partition: int
    result: Data | KafkaError

    def data(self) -> Data:
        """The fetched data; raises the broker's error if there was one."""
        if isinstance(self.result, KafkaError):
            raise KafkaError(self.result.code)
        return self.result

    @classmethod
    def _read(
        cls,
        reader: ZReader,
        preqs: TopicPartitionFetchRequest | None,
        validate_crc: bool,
    ) -> "Partition":
        partition = reader.read_i32()
        preq = preqs.get(partition) if preqs is not None else None
        req_offset = preq.offset if preq is not None else 0
        err = error_from_protocol(reader.read_i16())
        # The remaining fields are consumed even on error to keep the
        # reader positioned at the next partition.
        highwatermark = reader.read_i64()
        messages = parse_message_set(reader.read_bytes(), req_offset, validate_crc)
        if err is not None:
            return cls(partition, err)
        return cls(partition, Data(highwatermark, messages))


@dataclass
class Topic:
    """The fetch results for the requested partitions of one topic."""

    topic: str
    partitions: list[Partition] = field(default_factory=list)

    @classmethod
    def _read(
        cls, reader: ZReader, requests: FetchRequest | None, validate_crc: bool
    ) -> "Topic":
        name = reader.read_str()
        preqs = requests.get(name) if requests is not None else None
        partitions = reader.read_array(lambda r: Partition._read(r, preqs, validate_crc))
        return cls(name, partitions)


@dataclass
class Response:
    """A parsed fetch response, possibly covering several topics."""

    correlation_id: int
    topics: list[Topic] = field(default_factory=list)

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        requests: FetchRequest | None = None,
        validate_crc: bool = False,
    ) -> "Response":
        """Parse a response; messages before the requested offsets are dropped."""
        reader = ZReader(data)
        correlation_id = reader.read_i32()
        topics = reader.read_array(lambda r: Topic._read(r, requests, validate_crc))
        return cls(correlation_id, topics)


@dataclass
class ResponseParser:
    """Parses raw fetch responses with fixed settings."""

    validate_crc: bool = False
    requests: FetchRequest | None = None

    def parse(self, response: bytes) -> Response:
        return Response.from_bytes(response, self.requests, self.validate_crc)


def _read_protocol_message(raw: bytes, validate_crc: bool) -> tuple[int, bytes, bytes]:
    reader = ZReader(raw)
    msg_crc = reader.read_i32()
    if validate_crc and to_crc(reader.rest()) != msg_crc & 0xFFFFFFFF:
        raise KafkaError(KafkaCode.CORRUPT_MESSAGE)
    # Only the zero magic byte (kafka 0.8 and 0.9) is understood.
    if reader.read_i8() != 0:
        raise UnsupportedProtocolError("unsupported message magic byte")
    attr = reader.read_i8()
    key = reader.read_bytes()
    value = reader.read_bytes()
    return attr, key, value


def parse_message_set(raw_data: bytes, req_offset: int, validate_crc: bool) -> list[Message]:
    """Parse a message set, dropping messages below ``req_offset``.

    A truncated last message is silently ignored. A gzip-compressed
    message is decompressed and parsed as a message set of its own.
    """
    reader = ZReader(raw_data)
    messages: list[Message] = []
    while not reader.is_empty():
        try:
            offset = reader.read_i64()
            attr, key, value = _read_protocol_message(reader.read_bytes(), validate_crc)
        except UnexpectedEOFError:
            break
        codec = attr & _COMPRESSION_MASK
        if codec == _COMPRESSION_NONE:
            if offset >= req_offset:
                messages.append(Message(offset, key, value))
        elif codec == _COMPRESSION_GZIP:
            return parse_message_set(gzip.decompress(value), req_offset, validate_crc)
        else:
            raise UnsupportedCompressionError(f"unsupported compression codec {codec}")
    return messages