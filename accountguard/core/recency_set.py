"""Recency Set - bounded key -> last-seen mapping with least-recently-seen eviction.

Invariants:
    - len(set) <= capacity after every operation
    - last_seen for a key never moves backward (touch keeps the max)
    - When full, inserting a new key evicts the entry with the smallest last_seen;
      ties evict the entry inserted earliest
    - No expiry by age: a key leaves only through capacity eviction

Design Decisions:
    - dict + linear min() scan for eviction: capacities are small constants (tens of entries)
    - Not thread-safe on its own; AccountState serializes access with its lock
"""

from dataclasses import dataclass
from datetime import datetime
from collections.abc import Hashable, Iterable
from typing import Generic, TypeVar

from accountguard.core.errors import ConfigurationError

K = TypeVar("K", bound=Hashable)


@dataclass(frozen=True)
class RecencyEntry(Generic[K]):
    """One remembered key and the last time it was seen."""
    key: K
    last_seen: datetime


class RecencySet(Generic[K]):
    """Fixed-capacity recency set, generic over the key type."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ConfigurationError(
                f"Recency set capacity must be at least 1, got {capacity}", "capacity",
            )
        self._capacity = capacity
        self._last_seen: dict[K, datetime] = {}

    @classmethod
    def from_entries(cls, capacity: int, entries: Iterable[RecencyEntry[K]]) -> "RecencySet[K]":
        """Rebuild from persisted entries, replaying touches oldest-first.

        If more entries than `capacity` are supplied, only the most recent survive.
        """
        recency_set: RecencySet[K] = cls(capacity)
        for entry in sorted(entries, key=lambda e: e.last_seen):
            recency_set.touch(entry.key, entry.last_seen)
        return recency_set

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._last_seen)

    def __contains__(self, key: object) -> bool:
        return key in self._last_seen

    def contains(self, key: K) -> bool:
        return key in self._last_seen

    def last_seen(self, key: K) -> datetime | None:
        return self._last_seen.get(key)

    def touch(self, key: K, when: datetime) -> bool:
        """Record that `key` was seen at `when`.

        Returns True if the key was newly inserted, False if an existing
        entry was only refreshed.
        """
        existing = self._last_seen.get(key)
        if existing is not None:
            if when > existing:
                self._last_seen[key] = when
            return False

        if len(self._last_seen) >= self._capacity:
            self._evict_least_recent()
        self._last_seen[key] = when
        return True

    def entries(self) -> list[RecencyEntry[K]]:
        """All entries ordered oldest-first."""
        return [
            RecencyEntry(key, seen)
            for key, seen in sorted(self._last_seen.items(), key=lambda kv: kv[1])
        ]

    def _evict_least_recent(self) -> None:
        # min() returns the first minimum in dict (insertion) order
        oldest = min(self._last_seen, key=self._last_seen.__getitem__)
        del self._last_seen[oldest]
