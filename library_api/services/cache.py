"""
Read-Through Cache Service

An in-process cache for single-record reads.

Features:
- Get-or-populate: a miss calls the loader, stores its result, returns it
- Fixed TTL per entry, measured with an injected clock
- Explicit invalidation for write paths
- Hit/miss counters for the health endpoint

The cache is an explicit object owned by the application (app.state), not
a module-level singleton, so tests can build one with a fake clock and
expire entries deterministically.

Cache Strategy:
- Book lookups: 60 minute TTL (CACHE_TTL_BOOKS)
- Book lists: never cached
- Update/delete drop the book's entry (CACHE_INVALIDATE_ON_WRITE)

Concurrency:
The underlying TTLCache is guarded by a lock. The loader runs outside the
lock, so two concurrent misses on the same key may both load; entries are
immutable snapshots and the second store simply replaces the first. A load
that overlaps invalidate() or clear() is returned to its caller but not
stored.
"""

import logging
import threading
import time
from collections.abc import Callable, Hashable
from typing import Any, Generic, TypeVar

from cachetools import TTLCache

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]


class ReadThroughCache(Generic[T]):
    """
    TTL cache that fills itself from a loader on a miss.

    Args:
        ttl_seconds: Lifetime of an entry, counted from insertion
        clock: Time source in seconds (defaults to time.monotonic)
        maxsize: Maximum number of entries; least recently used entries
            are evicted first when full
        name: Label used in log messages

    Example:
        cache = ReadThroughCache(ttl_seconds=3600)
        snapshot = cache.get_or_populate(book_id, lambda: repo.snapshot(book_id))
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Clock = time.monotonic,
        maxsize: int = 1024,
        name: str = "cache",
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._entries: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=clock)
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        # Bumped by invalidate/clear; a load that overlaps a bump is not stored
        self._generation = 0

    def get(self, key: Hashable) -> T | None:
        """Return the live entry for key, or None if absent or expired."""
        with self._lock:
            return self._entries.get(key)

    def get_or_populate(self, key: Hashable, loader: Callable[[], T]) -> T:
        """
        Return the cached value for key, loading and storing it on a miss.

        Args:
            key: Cache key (e.g. a book id)
            loader: Zero-argument callable fetching the authoritative value

        Returns:
            The cached or freshly loaded value

        Raises:
            Whatever loader raises; nothing is cached in that case.
        """
        with self._lock:
            value = self._entries.get(key)
            if value is not None:
                self.hits += 1
                logger.debug(f"Cache HIT: {self.name}:{key}")
                return value
            self.misses += 1
            generation = self._generation

        logger.debug(f"Cache MISS: {self.name}:{key}")
        value = loader()

        with self._lock:
            if generation != self._generation:
                logger.debug(f"Cache SKIP: {self.name}:{key} invalidated during load")
                return value
            self._entries[key] = value
        logger.debug(f"Cache SET: {self.name}:{key} (TTL: {self.ttl_seconds}s)")

        return value

    def invalidate(self, key: Hashable) -> bool:
        """
        Drop the entry for key.

        Returns:
            True if a live entry was removed, False otherwise
        """
        with self._lock:
            removed = self._entries.pop(key, None) is not None
            self._generation += 1
        if removed:
            logger.debug(f"Cache DELETE: {self.name}:{key}")
        return removed

    def clear(self) -> None:
        """Drop every entry and reset the counters."""
        with self._lock:
            self._entries.clear()
            self._generation += 1
            self.hits = 0
            self.misses = 0

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)

    def stats(self) -> dict[str, Any]:
        """
        Get cache statistics for monitoring.

        Returns:
            Dictionary with entry count, hits, misses, and TTL
        """
        return {
            "status": "enabled",
            "entries": len(self),
            "hits": self.hits,
            "misses": self.misses,
            "ttl_seconds": self.ttl_seconds,
        }
