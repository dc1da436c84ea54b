"""Time-bounded in-memory cache for read operations."""

from __future__ import annotations

from collections.abc import Hashable
from datetime import UTC, datetime
from typing import Any


def _detach(value: Any) -> Any:
    # Lists are copied so callers cannot mutate a cached result
    return list(value) if isinstance(value, list) else value


class TTLCache:
    """
    Cache keyed by ``(operation, parameters)`` tuples with a fixed TTL.

    A TTL of 0 disables the cache: ``set`` is a no-op and ``get`` always
    misses. Expired entries are dropped on access and pruned on every
    ``set``, so the cache only holds entries younger than the TTL.
    """

    def __init__(self, ttl_seconds: int):
        self._ttl = ttl_seconds
        # key -> (value, cached_at)
        self._entries: dict[Hashable, tuple[Any, datetime]] = {}

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    def _expired(self, cached_at: datetime, now: datetime) -> bool:
        return (now - cached_at).total_seconds() > self._ttl

    def get(self, key: Hashable) -> tuple[bool, Any]:
        """Return ``(hit, value)``. Cached ``None`` values count as hits."""
        if key not in self._entries:
            return False, None

        value, cached_at = self._entries[key]
        if self._expired(cached_at, datetime.now(UTC)):
            del self._entries[key]
            return False, None
        return True, _detach(value)

    def set(self, key: Hashable, value: Any) -> None:
        if not self.enabled:
            return
        now = datetime.now(UTC)
        self.prune(now)
        self._entries[key] = (_detach(value), now)

    def prune(self, now: datetime | None = None) -> int:
        """Drop expired entries; returns how many were removed."""
        now = now or datetime.now(UTC)
        expired = [
            key for key, (_, cached_at) in self._entries.items() if self._expired(cached_at, now)
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
