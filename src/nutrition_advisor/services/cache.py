"""Key-value cache with per-entry expiry, holding wizard sessions."""

import time
from collections.abc import Callable
from typing import Protocol


class Cache(Protocol):
    """Cache interface for per-user session state."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a value that expires after ``ttl_seconds``."""

    def delete(self, key: str) -> None:
        """Drop a cached value."""


class InMemoryCache(Cache):
    """Process-local cache; entries vanish on expiry or restart.

    Expired entries are dropped when read and swept on every write, so
    abandoned sessions do not pile up.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float, object]] = {}

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a value, sweeping out expired entries first."""
        now = self._clock()
        self._sweep(now)
        self._entries[key] = (now + ttl_seconds, value)

    def delete(self, key: str) -> None:
        """Drop a cached value if present."""
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)

    def _sweep(self, now: float) -> None:
        expired = [
            key for key, (expires_at, _) in self._entries.items() if now >= expires_at
        ]
        for key in expired:
            del self._entries[key]
