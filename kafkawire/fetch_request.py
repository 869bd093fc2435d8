"""Fetch request of the Kafka protocol."""

from __future__ import annotations

from dataclasses import dataclass, field

from kafkawire.wire import API_KEY_FETCH, API_VERSION, Encoder, HeaderRequest


@dataclass
class PartitionFetchRequest:
    """Where to start fetching in one partition and how much at most."""

    offset: int
    max_bytes: int

    def encode(self, partition: int, out: Encoder) -> None:
        out.write_i32(partition)
        out.write_i64(self.offset)
        out.write_i32(self.max_bytes)


@dataclass
class TopicPartitionFetchRequest:
    """The partitions of one topic to fetch, keyed by partition id."""

    partitions: dict[int, PartitionFetchRequest] = field(default_factory=dict)

    def add(self, partition: int, offset: int, max_bytes: int) -> None:
        self.partitions[partition] = PartitionFetchRequest(offset, max_bytes)

    def get(self, partition: int) -> PartitionFetchRequest | None:
        return self.partitions.get(partition)

    def encode(self, topic: str, out: Encoder) -> None:
        out.write_str(topic)
        out.write_i32(len(self.partitions))
        for pid, p in self.partitions.items():
            p.encode(pid, out)


class FetchRequest:
    """Asks for messages from topic partitions."""

    def __init__(
        self, correlation_id: int, client_id: str, max_wait_time: int, min_bytes: int
    ) -> None:
        self.header = HeaderRequest(API_KEY_FETCH, API_VERSION, correlation_id, client_id)
        self.replica = -1
        self.max_wait_time = max_wait_time
        self.min_bytes = min_bytes
        self.topic_partitions: dict[str, TopicPartitionFetchRequest] = {}

    def __repr__(self) -> str:
        return (
            f"FetchRequest(header={self.header!r}, replica={self.replica!r}, "
            f"max_wait_time={self.max_wait_time!r}, min_bytes={self.min_bytes!r}, "
            f"topic_partitions={self.topic_partitions!r})"
        )

    def add(self, topic: str, partition: int, offset: int, max_bytes: int) -> None:
        """Fetch ``partition`` of ``topic`` from ``offset``; replaces an earlier entry."""
        self.topic_partitions.setdefault(topic, TopicPartitionFetchRequest()).add(
            partition, offset, max_bytes
        )

    def get(self, topic: str) -> TopicPartitionFetchRequest | None:
        return self.topic_partitions.get(topic)

    def encode(self, out: Encoder) -> None:
        self.header.encode(out)
        out.write_i32(self.replica)
        out.write_i32(self.max_wait_time)
        out.write_i32(self.min_bytes)
        out.write_i32(len(self.topic_partitions))
        for name, tp in self.topic_partitions.items():
            tp.encode(name, out)