"""In-process query cache keyed by tuples, with prefix invalidation."""

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Hashable, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")

QueryKey = tuple[Hashable, ...]


@dataclass(slots=True)
class _Entry:
    value: Any
    fetched_at: float


class QueryCache:
    """Cache of backend reads.

    Entries older than ``stale_seconds`` are refetched on the next read.
    ``invalidate(("profile",))`` drops every key starting with ``"profile"``.
    """

    def __init__(
        self,
        stale_seconds: float = 60.0,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._stale_seconds = stale_seconds
        self._clock = clock
        self._max_entries = max_entries
        self._entries: dict[QueryKey, _Entry] = {}

    def get(self, key: QueryKey) -> Any | None:
        """Return the fresh cached value, or None."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.fetched_at > self._stale_seconds:
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: QueryKey, value: Any) -> None:
        """Store ``value`` and drop stale or surplus entries.

        Keys stay in fetch order, so eviction only looks at the oldest.
        """
        now = self._clock()
        self._entries.pop(key, None)
        self._entries[key] = _Entry(value=value, fetched_at=now)

        evicted = 0
        for oldest in list(self._entries):
            entry = self._entries[oldest]
            fresh = now - entry.fetched_at <= self._stale_seconds
            if fresh and len(self._entries) <= self._max_entries:
                break
            del self._entries[oldest]
            evicted += 1
        if evicted:
            logger.debug("query_cache_evicted", count=evicted)

    async def fetch(self, key: QueryKey, loader: Callable[[], Awaitable[T]]) -> T:
        """Serve ``key`` from cache or run ``loader`` and store its result.

        A failing loader leaves the cache untouched.
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug("query_cache_hit", key=key)
            return cached  # type: ignore[no-any-return]

        value = await loader()
        self.set(key, value)
        return value

    def invalidate(self, prefix: QueryKey) -> int:
        """Drop every entry whose key starts with ``prefix``."""
        stale = [key for key in self._entries if key[: len(prefix)] == prefix]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug("query_cache_invalidated", prefix=prefix, count=len(stale))
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
