"""Produce request and response of the Kafka protocol."""

from __future__ import annotations

import enum
import gzip
from dataclasses import dataclass, field

from kafkawire.errors import KafkaCode, UnsupportedCompressionError, kafka_code_from_protocol
from kafkawire.wire import API_KEY_PRODUCE, API_VERSION, Encoder, HeaderRequest, HeaderResponse, to_crc
from kafkawire.zreader import ZReader

MESSAGE_MAGIC_BYTE = 0
"""The magic byte (message format version) used for sent messages."""


class Compression(enum.IntEnum):
    """Compression codecs, as stored in the low bits of a message's attributes."""

    NONE = 0
    GZIP = 1
    SNAPPY = 2


def _as_i32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= (1 << 31) else value


def _compress(data: bytes, compression: Compression) -> bytes:
    if compression is Compression.GZIP:
        return gzip.compress(data)
    raise UnsupportedCompressionError(f"cannot compress with {compression.name}")


@dataclass
class MessageProduceRequest:
    """A single message with optional key and value."""

    key: bytes | None = None
    value: bytes | None = None

    def encode(self, magic: int = MESSAGE_MAGIC_BYTE, attributes: int = 0) -> bytes:
        """Render as ``Offset MessageSize Message``, the offset always zero."""
        body = Encoder()
        body.write_i8(magic)
        body.write_i8(attributes)
        body.write_bytes(self.key)
        body.write_bytes(self.value)
        payload = body.getvalue()

        out = Encoder()
        out.write_i64(0)
        out.write_i32(4 + len(payload))
        out.write_i32(_as_i32(to_crc(payload)))
        return out.getvalue() + payload


@dataclass
class PartitionProduceRequest:
    """The messages destined for one partition."""

    partition: int
    messages: list[MessageProduceRequest] = field(default_factory=list)

    def add(self, key: bytes | None, value: bytes | None) -> None:
        self.messages.append(MessageProduceRequest(key, value))

    def encode(self, out: Encoder, compression: Compression = Compression.NONE) -> None:
        """Render as ``Partition MessageSetSize MessageSet``."""
        compression = Compression(compression)
        out.write_i32(self.partition)
        message_set = b"".join(m.encode(MESSAGE_MAGIC_BYTE, 0) for m in self.messages)
        if compression is not Compression.NONE:
            cdata = _compress(message_set, compression)
            message_set = MessageProduceRequest(None, cdata).encode(
                MESSAGE_MAGIC_BYTE, int(compression)
            )
        out.write_bytes(message_set)


@dataclass
class TopicPartitionProduceRequest:
    """The messages destined for the partitions of one topic."""

    topic: str
    compression: Compression = Compression.NONE
    partitions: list[PartitionProduceRequest] = field(default_factory=list)

    def add(self, partition: int, key: bytes | None, value: bytes | None) -> None:
        pp = next((pp for pp in self.partitions if pp.partition == partition), None)
        if pp is None:
            pp = PartitionProduceRequest(partition)
            self.partitions.append(pp)
        pp.add(key, value)

    def encode(self, out: Encoder) -> None:
        out.write_str(self.topic)
        out.write_array(self.partitions, lambda enc, p: p.encode(enc, self.compression))


class ProduceRequest:
    """Sends messages to topic partitions."""

    def __init__(
        self,
        required_acks: int,
        timeout: int,
        correlation_id: int,
        client_id: str,
        compression: Compression,
    ) -> None:
        self.header = HeaderRequest(API_KEY_PRODUCE, API_VERSION, correlation_id, client_id)
        self.required_acks = required_acks
        self.timeout = timeout
        self.compression = Compression(compression)
        self.topic_partitions: list[TopicPartitionProduceRequest] = []

    def __repr__(self) -> str:
        return (
            f"ProduceRequest(header={self.header!r}, required_acks={self.required_acks!r}, "
            f"timeout={self.timeout!r}, compression={self.compression!r}, "
            f"topic_partitions={self.topic_partitions!r})"
        )

    def add(self, topic: str, partition: int, key: bytes | None, value: bytes | None) -> None:
        tp = next((tp for tp in self.topic_partitions if tp.topic == topic), None)
        if tp is None:
            tp = TopicPartitionProduceRequest(topic, self.compression)
            self.topic_partitions.append(tp)
        tp.add(partition, key, value)

    def encode(self, out: Encoder) -> None:
        self.header.encode(out)
        out.write_i16(self.required_acks)
        out.write_i32(self.timeout)
        out.write_array(self.topic_partitions, lambda enc, tp: tp.encode(enc))


@dataclass(frozen=True)
class ProducePartitionConfirm:
    """The outcome for one partition: an offset on success, an error code otherwise."""

    partition: int
    offset: int | None = None
    error: KafkaCode | None = None

    @property
    def is_ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ProduceConfirm:
    """The outcomes for the partitions of one topic."""

    topic: str
    partition_confirms: list[ProducePartitionConfirm]


@dataclass
class PartitionProduceResponse:
    partition: int = 0
    error: int = 0
    offset: int = 0

    @classmethod
    def decode(cls, reader: ZReader) -> "PartitionProduceResponse":
        return cls(partition=reader.read_i32(), error=reader.read_i16(), offset=reader.read_i64())

    def get_response(self) -> ProducePartitionConfirm:
        code = kafka_code_from_protocol(self.error)
        if code is None:
            return ProducePartitionConfirm(self.partition, offset=self.offset)
        return ProducePartitionConfirm(self.partition, error=code)


@dataclass
class TopicPartitionProduceResponse:
    topic: str = ""
    partitions: list[PartitionProduceResponse] = field(default_factory=list)

    @classmethod
    def decode(cls, reader: ZReader) -> "TopicPartitionProduceResponse":
        return cls(
            topic=reader.read_str(),
            partitions=reader.read_array(PartitionProduceResponse.decode),
        )

    def get_response(self) -> ProduceConfirm:
        return ProduceConfirm(self.topic, [p.get_response() for p in self.partitions])


@dataclass
class ProduceResponse:
    header: HeaderResponse = field(default_factory=HeaderResponse)
    topic_partitions: list[TopicPartitionProduceResponse] = field(default_factory=list)

    @classmethod
    def decode(cls, reader: ZReader) -> "ProduceResponse":
        return cls(
            header=HeaderResponse.decode(reader),
            topic_partitions=reader.read_array(TopicPartitionProduceResponse.decode),
        )

    def get_response(self) -> list[ProduceConfirm]:
        return [tp.get_response() for tp in self.topic_partitions]