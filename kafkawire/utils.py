"""Small value types shared across the protocol modules."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PartitionOffset:
    """An offset retrieved for one partition of an already known topic."""

    partition: int
    offset: int