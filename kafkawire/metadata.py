"""Metadata request and response of the Kafka protocol."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from kafkawire.wire import API_KEY_METADATA, API_VERSION, Encoder, HeaderRequest, HeaderResponse
from kafkawire.zreader import ZReader


class MetadataRequest:
    """Asks for broker and topic metadata; no topics means all topics."""

    def __init__(self, correlation_id: int, client_id: str, topics: Iterable[str]) -> None:
        self.header = HeaderRequest(API_KEY_METADATA, API_VERSION, correlation_id, client_id)
        self.topics = tuple(topics)

    def __repr__(self) -> str:
        return f"MetadataRequest(header={self.header!r}, topics={self.topics!r})"

    def encode(self, out: Encoder) -> None:
        self.header.encode(out)
        out.write_array(self.topics, Encoder.write_str)


@dataclass
class BrokerMetadata:
    node_id: int = 0
    host: str = ""
    port: int = 0

    @classmethod
    def decode(cls, reader: ZReader) -> "BrokerMetadata":
        return cls(node_id=reader.read_i32(), host=reader.read_str(), port=reader.read_i32())


@dataclass
class PartitionMetadata:
    error: int = 0
    id: int = 0
    leader: int = 0
    replicas: list[int] = field(default_factory=list)
    isr: list[int] = field(default_factory=list)

    @classmethod
    def decode(cls, reader: ZReader) -> "PartitionMetadata":
        return cls(
            error=reader.read_i16(),
            id=reader.read_i32(),
            leader=reader.read_i32(),
            replicas=reader.read_array(ZReader.read_i32),
            isr=reader.read_array(ZReader.read_i32),
        )


@dataclass
class TopicMetadata:
    error: int = 0
    topic: str = ""
    partitions: list[PartitionMetadata] = field(default_factory=list)

    @classmethod
    def decode(cls, reader: ZReader) -> "TopicMetadata":
        return cls(
            error=reader.read_i16(),
            topic=reader.read_str(),
            partitions=reader.read_array(PartitionMetadata.decode),
        )


@dataclass
class MetadataResponse:
    header: HeaderResponse = field(default_factory=HeaderResponse)
    brokers: list[BrokerMetadata] = field(default_factory=list)
    topics: list[TopicMetadata] = field(default_factory=list)

    @classmethod
    def decode(cls, reader: ZReader) -> "MetadataResponse":
        return cls(
            header=HeaderResponse.decode(reader),
            brokers=reader.read_array(BrokerMetadata.decode),
            topics=reader.read_array(TopicMetadata.decode),
        )