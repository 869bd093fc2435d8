"""Group coordinator, offset fetch and offset commit messages of the Kafka protocol."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from kafkawire.errors import (
    KafkaCode,
    error_from_protocol,
    kafka_code_from_protocol,
)
from kafkawire.utils import PartitionOffset
from kafkawire.wire import (
    API_KEY_GROUP_COORDINATOR,
    API_KEY_OFFSET_COMMIT,
    API_KEY_OFFSET_FETCH,
    API_VERSION,
    Encoder,
    HeaderRequest,
    HeaderResponse,
)
from kafkawire.zreader import ZReader


class GroupCoordinatorRequest:
    """Asks which broker coordinates a consumer group."""

    def __init__(self, group: str, correlation_id: int, client_id: str) -> None:
        self.header = HeaderRequest(
            API_KEY_GROUP_COORDINATOR, API_VERSION, correlation_id, client_id
        )
        self.group = group

    def __repr__(self) -> str:
        return f"GroupCoordinatorRequest(header={self.header!r}, group={self.group!r})"

    def encode(self, out: Encoder) -> None:
        self.header.encode(out)
        out.write_str(self.group)


@dataclass
class GroupCoordinatorResponse:
    header: HeaderResponse = field(default_factory=HeaderResponse)
    error: int = 0
    broker_id: int = 0
    port: int = 0
    host: str = ""

    @classmethod
    def decode(cls, reader: ZReader) -> "GroupCoordinatorResponse":
        header = HeaderResponse.decode(reader)
        error = reader.read_i16()
        broker_id = reader.read_i32()
        host = reader.read_str()
        port = reader.read_i32()
        return cls(header=header, error=error, broker_id=broker_id, port=port, host=host)

    def into_result(self) -> "GroupCoordinatorResponse":
        """Return self, or raise the error the broker reported."""
        err = error_from_protocol(self.error)
        if err is not None:
            raise err
        return self


# --------------------------------------------------------------------


class OffsetFetchVersion(enum.IntEnum):
    V0 = 0
    """Offsets are retrieved from zookeeper."""
    V1 = 1
    """Offsets are retrieved from kafka itself (as of 0.8.2)."""


@dataclass
class PartitionOffsetFetchRequest:
    partition: int

    def encode(self, out: Encoder) -> None:
        out.write_i32(self.partition)


@dataclass
class TopicPartitionOffsetFetchRequest:
    topic: str
    partitions: list[PartitionOffsetFetchRequest] = field(default_factory=list)

    def add(self, partition: int) -> None:
        self.partitions.append(PartitionOffsetFetchRequest(partition))

    def encode(self, out: Encoder) -> None:
        out.write_str(self.topic)
        out.write_array(self.partitions, lambda enc, p: p.encode(enc))


class OffsetFetchRequest:
    """Asks for the committed offsets of a consumer group."""

    def __init__(
        self,
        group: str,
        version: OffsetFetchVersion,
        correlation_id: int,
        client_id: str,
    ) -> None:
        self.header = HeaderRequest(API_KEY_OFFSET_FETCH, int(version), correlation_id, client_id)
        self.group = group
        self.topic_partitions: list[TopicPartitionOffsetFetchRequest] = []

    def __repr__(self) -> str:
        return (
            f"OffsetFetchRequest(header={self.header!r}, group={self.group!r}, "
            f"topic_partitions={self.topic_partitions!r})"
        )

    def add(self, topic: str, partition: int) -> None:
        tp = next((tp for tp in self.topic_partitions if tp.topic == topic), None)
        if tp is None:
            tp = TopicPartitionOffsetFetchRequest(topic)
            self.topic_partitions.append(tp)
        tp.add(partition)

    def encode(self, out: Encoder) -> None:
        self.header.encode(out)
        out.write_str(self.group)
        out.write_array(self.topic_partitions, lambda enc, tp: tp.encode(enc))


@dataclass
class PartitionOffsetFetchResponse:
    partition: int = 0
    offset: int = 0
    metadata: str = ""
    error: int = 0

    @classmethod
    def decode(cls, reader: ZReader) -> "PartitionOffsetFetchResponse":
        return cls(
            partition=reader.read_i32(),
            offset=reader.read_i64(),
            metadata=reader.read_str(),
            error=reader.read_i16(),
        )

    def get_offsets(self) -> PartitionOffset:
        """The committed offset; -1 when the group has none; raises on other errors."""
        code = kafka_code_from_protocol(self.error)
        if code is KafkaCode.UNKNOWN_TOPIC_OR_PARTITION:
            # Protocol v0 reports this when the group has no offset yet;
            # align with v1, which answers -1.
            return PartitionOffset(partition=self.partition, offset=-1)
        if code is not None:
            raise error_from_protocol(self.error)
        return PartitionOffset(partition=self.partition, offset=self.offset)


@dataclass
class TopicPartitionOffsetFetchResponse:
    topic: str = ""
    partitions: list[PartitionOffsetFetchResponse] = field(default_factory=list)

    @classmethod
    def decode(cls, reader: ZReader) -> "TopicPartitionOffsetFetchResponse":
        return cls(
            topic=reader.read_str(),
            partitions=reader.read_array(PartitionOffsetFetchResponse.decode),
        )


@dataclass
class OffsetFetchResponse:
    header: HeaderResponse = field(default_factory=HeaderResponse)
    topic_partitions: list[TopicPartitionOffsetFetchResponse] = field(default_factory=list)

    @classmethod
    def decode(cls, reader: ZReader) -> "OffsetFetchResponse":
        return cls(
            header=HeaderResponse.decode(reader),
            topic_partitions=reader.read_array(TopicPartitionOffsetFetchResponse.decode),
        )


# --------------------------------------------------------------------


class OffsetCommitVersion(enum.IntEnum):
    V0 = 0
    """Offsets are stored in zookeeper."""
    V1 = 1
    """Offsets are stored in kafka (as of 0.8.2)."""
    V2 = 2
    """Offsets are stored in kafka (as of 0.9.0)."""


@dataclass
class PartitionOffsetCommitRequest:
    partition: int
    offset: int
    metadata: str


@dataclass
class TopicPartitionOffsetCommitRequest:
    topic: str
    partitions: list[PartitionOffsetCommitRequest] = field(default_factory=list)

    def add(self, partition: int, offset: int, metadata: str) -> None:
        self.partitions.append(PartitionOffsetCommitRequest(partition, offset, metadata))


class OffsetCommitRequest:
    """Commits offsets on behalf of a consumer group."""

    def __init__(
        self,
        group: str,
        version: OffsetCommitVersion,
        correlation_id: int,
        client_id: str,
    ) -> None:
        self.header = HeaderRequest(
            API_KEY_OFFSET_COMMIT, int(version), correlation_id, client_id
        )
        self.group = group
        self.topic_partitions: list[TopicPartitionOffsetCommitRequest] = []

    def __repr__(self) -> str:
        return (
            f"OffsetCommitRequest(header={self.header!r}, group={self.group!r}, "
            f"topic_partitions={self.topic_partitions!r})"
        )

    def add(self, topic: str, partition: int, offset: int, metadata: str) -> None:
        tp = next((tp for tp in self.topic_partitions if tp.topic == topic), None)
        if tp is None:
            tp = TopicPartitionOffsetCommitRequest(topic)
            self.topic_partitions.append(tp)
        tp.add(partition, offset, metadata)

    def encode(self, out: Encoder) -> None:
        """Encode the request; raises ``ValueError`` for an unknown version."""
        version = OffsetCommitVersion(self.header.api_version)
        self.header.encode(out)
        out.write_str(self.group)
        if version in (OffsetCommitVersion.V1, OffsetCommitVersion.V2):
            out.write_i32(-1)
            out.write_str("")
        if version is OffsetCommitVersion.V2:
            out.write_i64(-1)

        def encode_partition(enc: Encoder, p: PartitionOffsetCommitRequest) -> None:
            enc.write_i32(p.partition)
            enc.write_i64(p.offset)
            if version is OffsetCommitVersion.V1:
                enc.write_i64(-1)
            enc.write_str(p.metadata)

        def encode_topic(enc: Encoder, tp: TopicPartitionOffsetCommitRequest) -> None:
            enc.write_str(tp.topic)
            enc.write_array(tp.partitions, encode_partition)

        out.write_array(self.topic_partitions, encode_topic)


@dataclass
class PartitionOffsetCommitResponse:
    partition: int = 0
    error: int = 0

    @classmethod
    def decode(cls, reader: ZReader) -> "PartitionOffsetCommitResponse":
        return cls(partition=reader.read_i32(), error=reader.read_i16())

    def to_error(self) -> KafkaCode | None:
        return kafka_code_from_protocol(self.error)


@dataclass
class TopicPartitionOffsetCommitResponse:
    topic: str = ""
    partitions: list[PartitionOffsetCommitResponse] = field(default_factory=list)

    @classmethod
    def decode(cls, reader: ZReader) -> "TopicPartitionOffsetCommitResponse":
        return cls(
            topic=reader.read_str(),
            partitions=reader.read_array(PartitionOffsetCommitResponse.decode),
        )


@dataclass
class OffsetCommitResponse:
    header: HeaderResponse = field(default_factory=HeaderResponse)
    topic_partitions: list[TopicPartitionOffsetCommitResponse] = field(default_factory=list)

    @classmethod
    def decode(cls, reader: ZReader) -> "OffsetCommitResponse":
        return cls(
            header=HeaderResponse.decode(reader),
            topic_partitions=reader.read_array(TopicPartitionOffsetCommitResponse.decode),
        )