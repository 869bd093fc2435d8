"""Offset request and response of the Kafka protocol."""

from __future__ import annotations

from dataclasses import dataclass, field

from kafkawire.errors import KafkaError, kafka_code_from_protocol
from kafkawire.utils import PartitionOffset
from kafkawire.wire import API_KEY_OFFSET, API_VERSION, Encoder, HeaderRequest, HeaderResponse
from kafkawire.zreader import ZReader


@dataclass
class PartitionOffsetRequest:
    """Asks for the offsets of one partition before a given time."""

    partition: int
    time: int
    max_offsets: int = 1

    def encode(self, out: Encoder) -> None:
        out.write_i32(self.partition)
        out.write_i64(self.time)
        out.write_i32(self.max_offsets)


@dataclass
class TopicPartitionOffsetRequest:
    """The partitions of one topic whose offsets are requested."""

    topic: str
    partitions: list[PartitionOffsetRequest] = field(default_factory=list)

    def add(self, partition: int, time: int) -> None:
        self.partitions.append(PartitionOffsetRequest(partition, time))

    def encode(self, out: Encoder) -> None:
        out.write_str(self.topic)
        out.write_array(self.partitions, lambda enc, p: p.encode(enc))


class OffsetRequest:
    """Asks a broker for the offsets of topic partitions."""

    def __init__(self, correlation_id: int, client_id: str) -> None:
        self.header = HeaderRequest(API_KEY_OFFSET, API_VERSION, correlation_id, client_id)
        self.replica = -1
        self.topic_partitions: list[TopicPartitionOffsetRequest] = []

    def __repr__(self) -> str:
        return (
            f"OffsetRequest(header={self.header!r}, replica={self.replica!r}, "
            f"topic_partitions={self.topic_partitions!r})"
        )

    def add(self, topic: str, partition: int, time: int) -> None:
        """Request the offset of ``partition`` of ``topic`` before ``time``."""
        tp = next((tp for tp in self.topic_partitions if tp.topic == topic), None)
        if tp is None:
            tp = TopicPartitionOffsetRequest(topic)
            self.topic_partitions.append(tp)
        tp.add(partition, time)

    def encode(self, out: Encoder) -> None:
        self.header.encode(out)
        out.write_i32(self.replica)
        out.write_array(self.topic_partitions, lambda enc, tp: tp.encode(enc))


@dataclass
class PartitionOffsetResponse:
    partition: int = 0
    error: int = 0
    offset: list[int] = field(default_factory=list)

    @classmethod
    def decode(cls, reader: ZReader) -> "PartitionOffsetResponse":
        return cls(
            partition=reader.read_i32(),
            error=reader.read_i16(),
            offset=reader.read_array(ZReader.read_i64),
        )

    def to_offset(self) -> PartitionOffset:
        """The first reported offset, or -1 if none; raises on a broker error."""
        code = kafka_code_from_protocol(self.error)
        if code is not None:
            raise KafkaError(code)
        offset = self.offset[0] if self.offset else -1
        return PartitionOffset(partition=self.partition, offset=offset)


@dataclass
class TopicPartitionOffsetResponse:
    topic: str = ""
    partitions: list[PartitionOffsetResponse] = field(default_factory=list)

    @classmethod
    def decode(cls, reader: ZReader) -> "TopicPartitionOffsetResponse":
        return cls(
            topic=reader.read_str(),
            partitions=reader.read_array(PartitionOffsetResponse.decode),
        )


@dataclass
class OffsetResponse:
    header: HeaderResponse = field(default_factory=HeaderResponse)
    topic_partitions: list[TopicPartitionOffsetResponse] = field(default_factory=list)

    @classmethod
    def decode(cls, reader: ZReader) -> "OffsetResponse":
        return cls(
            header=HeaderResponse.decode(reader),
            topic_partitions=reader.read_array(TopicPartitionOffsetResponse.decode),
        )