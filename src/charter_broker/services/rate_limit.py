"""Request rate limiting."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

from charter_broker.domain.errors import RateLimitError


class RateLimiter(Protocol):
    """Counts requests per key within a window."""

    def hit(self, key: str) -> bool:
        """Record a request and return false once the key is over its limit."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class _Window:
    count: int
    resets_at: datetime


@dataclass
class InMemoryRateLimiter(RateLimiter):
    """Fixed-window limiter held in process memory.

    Counts are not shared between processes, so a deployment with several
    instances allows up to ``limit`` requests per instance.
    """

    limit: int
    window_seconds: int
    clock: Callable[[], datetime] = _utcnow
    _windows: dict[str, _Window] = field(default_factory=dict, init=False)

    def hit(self, key: str) -> bool:
        """Record a request for key and report whether it is allowed."""
        now = self.clock()
        window = self._windows.get(key)
        if window is None or now >= window.resets_at:
            self._sweep(now)
            self._windows[key] = _Window(
                count=1, resets_at=now + timedelta(seconds=self.window_seconds)
            )
            return True
        if window.count >= self.limit:
            return False
        window.count += 1
        return True

    def _sweep(self, now: datetime) -> None:
        expired = [
            key for key, window in self._windows.items() if now >= window.resets_at
        ]
        for key in expired:
            del self._windows[key]


def enforce(limiter: RateLimiter, key: str, message: str) -> None:
    """Raise RateLimitError when the key has exhausted its budget."""
    if not limiter.hit(key):
        raise RateLimitError(message)
