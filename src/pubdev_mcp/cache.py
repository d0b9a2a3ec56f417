"""Time-bounded response cache.

Holds registry payloads keyed by the logical request (endpoint + parameters).
An entry is fresh while its age is below the freshness window; stale entries
are not purged, they are superseded by the next store under the same key.

The cache is an explicitly owned object handed to the gateway, not module
state, so tests can run it against a fake clock.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

FRESHNESS_WINDOW: float = 300.0  # 5 minutes

Clock = Callable[[], float]


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached registry payload with its store time."""
    key: str
    payload: object
    stored_at: float

    def age(self, now: float) -> float:
        return now - self.stored_at


class ResponseCache:
    """In-memory response cache with a fixed freshness window.

    At most one entry per key; a later store replaces the earlier one.
    Nothing is ever evicted.

    Args:
        freshness_window: Maximum age in seconds for an entry to be served
        clock: Monotonic time source

    Example:
        >>> cache = ResponseCache()
        >>> _ = cache.store("package-http", {"name": "http"})
        >>> cache.lookup("package-http").payload
        {'name': 'http'}
    """

    __slots__ = ("_entries", "_freshness_window", "_clock")

    def __init__(self, freshness_window: float = FRESHNESS_WINDOW, clock: Clock = time.monotonic) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._freshness_window = freshness_window
        self._clock = clock

    @property
    def freshness_window(self) -> float:
        return self._freshness_window

    def now(self) -> float:
        return self._clock()

    def is_fresh(self, entry: CacheEntry) -> bool:
        return entry.age(self._clock()) < self._freshness_window

    def lookup(self, key: str) -> CacheEntry | None:
        """Return the entry under `key` if it is still fresh."""
        entry = self._entries.get(key)
        if entry is None or not self.is_fresh(entry):
            return None
        return entry

    def peek(self, key: str) -> CacheEntry | None:
        """Return the entry under `key` regardless of age."""
        return self._entries.get(key)

    def store(self, key: str, payload: object, *, stored_at: float | None = None) -> CacheEntry:
        """Store `payload` under `key`, replacing any previous entry.

        `stored_at` defaults to the current clock reading; the gateway passes
        the time the request was issued.
        """
        entry = CacheEntry(key=key, payload=payload, stored_at=self._clock() if stored_at is None else stored_at)
        self._entries[key] = entry
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def size(self) -> int:
        return len(self._entries)

    def stats(self) -> dict[str, object]:
        """Get cache statistics for monitoring."""
        stale = sum(1 for e in self._entries.values() if not self.is_fresh(e))
        return {
            "total_entries": len(self._entries),
            "stale_entries": stale,
            "fresh_entries": len(self._entries) - stale,
            "freshness_window": self._freshness_window,
        }
