"""Simple cache abstractions."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

SOFT_LIMIT = 100


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL in seconds."""

    def clear(self) -> None:
        """Drop every cached entry."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class _CacheEntry:
    value: object
    stored_at: datetime
    expires_at: datetime


@dataclass
class CacheStats:
    """Snapshot of cache occupancy."""

    size: int
    max_age_seconds: int


@dataclass
class InMemoryCache(Cache):
    """Process-local TTL cache; expired entries are swept past a soft limit."""

    clock: Callable[[], datetime] = _utcnow
    soft_limit: int = SOFT_LIMIT
    _entries: dict[str, _CacheEntry] = field(default_factory=dict, init=False)

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL."""
        now = self.clock()
        self._entries[key] = _CacheEntry(
            value=value,
            stored_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
        )
        if len(self._entries) > self.soft_limit:
            self.sweep()

    def sweep(self) -> int:
        """Drop all expired entries and return how many were removed."""
        now = self.clock()
        expired = [
            key for key, entry in self._entries.items() if now >= entry.expires_at
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        """Drop every cached entry."""
        self._entries.clear()

    def stats(self) -> CacheStats:
        """Return size and the age of the oldest live entry."""
        self.sweep()
        now = self.clock()
        ages = [
            (now - entry.stored_at).total_seconds()
            for entry in self._entries.values()
        ]
        return CacheStats(
            size=len(self._entries), max_age_seconds=round(max(ages, default=0))
        )
