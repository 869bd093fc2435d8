"""Error codes of the Kafka protocol and the exceptions raised by this package."""

from __future__ import annotations

import enum


class KafkaCode(enum.IntEnum):
    """Error codes a Kafka broker reports in its responses."""

    UNKNOWN = -1
    OFFSET_OUT_OF_RANGE = 1
    CORRUPT_MESSAGE = 2
    UNKNOWN_TOPIC_OR_PARTITION = 3
    INVALID_MESSAGE_SIZE = 4
    LEADER_NOT_AVAILABLE = 5
    NOT_LEADER_FOR_PARTITION = 6
    REQUEST_TIMED_OUT = 7
    BROKER_NOT_AVAILABLE = 8
    REPLICA_NOT_AVAILABLE = 9
    MESSAGE_SIZE_TOO_LARGE = 10
    STALE_CONTROLLER_EPOCH = 11
    OFFSET_METADATA_TOO_LARGE = 12
    NETWORK_EXCEPTION = 13
    GROUP_LOAD_IN_PROGRESS = 14
    GROUP_COORDINATOR_NOT_AVAILABLE = 15
    NOT_COORDINATOR_FOR_GROUP = 16
    INVALID_TOPIC = 17
    RECORD_LIST_TOO_LARGE = 18
    NOT_ENOUGH_REPLICAS = 19
    NOT_ENOUGH_REPLICAS_AFTER_APPEND = 20
    INVALID_REQUIRED_ACKS = 21
    ILLEGAL_GENERATION = 22
    INCONSISTENT_GROUP_PROTOCOL = 23
    INVALID_GROUP_ID = 24
    UNKNOWN_MEMBER_ID = 25
    INVALID_SESSION_TIMEOUT = 26
    REBALANCE_IN_PROGRESS = 27
    INVALID_COMMIT_OFFSET_SIZE = 28
    TOPIC_AUTHORIZATION_FAILED = 29
    GROUP_AUTHORIZATION_FAILED = 30
    CLUSTER_AUTHORIZATION_FAILED = 31
    INVALID_TIMESTAMP = 32
    UNSUPPORTED_SASL_MECHANISM = 33
    ILLEGAL_SASL_STATE = 34
    UNSUPPORTED_VERSION = 35


class KafkaClientError(Exception):
    """Base class of every error raised by this package."""


class KafkaError(KafkaClientError):
    """An error code reported by a Kafka broker."""

    def __init__(self, code: KafkaCode) -> None:
        super().__init__(f"Kafka error: {code.name}")
        self.code = code

    def __eq__(self, other: object) -> bool:
        if isinstance(other, KafkaError):
            return self.code == other.code
        return NotImplemented

    def __hash__(self) -> int:
        return hash((KafkaError, self.code))


class UnexpectedEOFError(KafkaClientError):
    """The input ended before a complete value could be read."""


class StringDecodeError(KafkaClientError):
    """A protocol string was not valid UTF-8."""


class UnsupportedCompressionError(KafkaClientError):
    """A message used a compression codec that is not supported."""


class UnsupportedProtocolError(KafkaClientError):
    """A message used a protocol version that is not supported."""


class InvalidDurationError(KafkaClientError):
    """A duration does not fit into the protocol's millisecond field."""


def kafka_code_from_protocol(n: int) -> KafkaCode | None:
    """Map a protocol error number to a code; zero means no error."""
    if n == 0:
        return None
    if KafkaCode.OFFSET_OUT_OF_RANGE <= n <= KafkaCode.UNSUPPORTED_VERSION:
        return KafkaCode(n)
    return KafkaCode.UNKNOWN


def error_from_protocol(n: int) -> KafkaError | None:
    """Map a protocol error number to an exception; zero means no error."""
    code = kafka_code_from_protocol(n)
    return None if code is None else KafkaError(code)