"""Cache service implementation.

This module provides an abstract cache service interface and a concrete
in-process implementation used by route handlers to avoid repeating
database queries on warm instances.

The local store is per process: every worker owns an independent copy, there
is no coherence between instances and nothing survives a restart.

Eviction is an approximate LRU keyed on hit counts. When a write finds the
store already over capacity, the least-read 20% of capacity is dropped
before the new entry goes in. Expiry is lazy: an expired entry is only
removed when it is read or when a sweep happens to pick it.
"""

import inspect
import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from reelcache.config import DEFAULT_EVICTION_RATIO, DEFAULT_MAX_ENTRIES, load_settings
from reelcache.models import CacheStats

logger = logging.getLogger(__name__)

Compute = Callable[[], Union[Awaitable[Any], Any]]


class CacheTTL:
    """Preset TTLs in seconds, one per data category."""

    #: Film catalog, changes rarely
    CATALOG = 300
    #: Trending and recommendations
    RECOMMENDATIONS = 60
    #: User profiles
    PROFILE = 120
    #: Analytics, expensive queries
    ANALYTICS = 600
    #: Config and settings, almost never changes
    CONFIG = 1800


@dataclass
class CacheEntry:
    """A stored value with its absolute expiry and read counter."""

    key: str
    value: Any
    expires_at: float
    hits: int = 0

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class CacheService(ABC):
    """Abstract base class for cache services.

    Defines the synchronous get/set/delete/stats interface and implements
    the cache-through helper on top of it.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Retrieve cached value by key.

        Args:
            key: The cache key to look up.

        Returns:
            The cached value if present and unexpired, None otherwise.
        """

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: float = 60) -> None:
        """Store value in cache with a TTL.

        Args:
            key: The cache key to store under.
            value: The value to cache. Opaque to the store.
            ttl_seconds: Time-to-live in seconds. Defaults to 60.
        """

    @abstractmethod
    def delete(self, key_or_prefix: str, is_prefix: bool = False) -> int:
        """Delete a single key, or every key sharing a prefix.

        Args:
            key_or_prefix: Exact key, or key prefix when ``is_prefix`` is set.
            is_prefix: Match by prefix instead of exact key.

        Returns:
            Number of entries removed.
        """

    @abstractmethod
    def stats(self) -> CacheStats:
        """Return a snapshot of the store for monitoring."""

    async def cache_through(
        self, key: str, ttl_seconds: float, compute: Compute
    ) -> Any:
        """Return the cached value for ``key`` or compute, cache and return it.

        ``compute`` may be a coroutine function or a plain callable. If it
        raises, the exception propagates and nothing is cached.

        Concurrent misses on the same key each run ``compute``; in-flight
        computations are not shared between callers.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        try:
            value = compute()
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            logger.warning(f"[CACHE] Compute failed for {key}: {e}")
            raise

        self.set(key, value, ttl_seconds)
        return value


class LocalCacheService(CacheService):
    """Bounded in-memory cache with TTL expiry and hit-count eviction.

    All operations on the store, the eviction sweep included, run under one
    re-entrant lock so a single instance may be shared by the threadpool
    that serves sync route handlers. ``cache_through`` does not hold the lock
    while ``compute`` runs.

    Attributes:
        _store: Entries in insertion order.
        _max_entries: Capacity checked at the start of each write.
        _evict_count: Entries removed per eviction sweep.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        eviction_ratio: float = DEFAULT_EVICTION_RATIO,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the local cache service.

        Args:
            max_entries: Maximum number of live entries. Defaults to 500.
            eviction_ratio: Share of ``max_entries`` removed per sweep.
                Defaults to 0.2.
            clock: Returns the current time in seconds. Injectable for tests.
        """
        self._store: dict[str, CacheEntry] = {}
        self._max_entries = max_entries
        self._evict_count = int(max_entries * eviction_ratio)
        self._clock = clock
        self._lock = threading.RLock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                logger.debug(f"[CACHE] Miss {key}")
                return None
            if entry.is_expired(self._clock()):
                del self._store[key]
                logger.debug(f"[CACHE] Expired {key}")
                return None
            entry.hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float = 60) -> None:
        with self._lock:
            self._evict()
            self._store[key] = CacheEntry(
                key=key,
                value=value,
                expires_at=self._clock() + ttl_seconds,
            )

    def delete(self, key_or_prefix: str, is_prefix: bool = False) -> int:
        with self._lock:
            if not is_prefix:
                return 1 if self._store.pop(key_or_prefix, None) is not None else 0

            doomed = [k for k in self._store if k.startswith(key_or_prefix)]
            for k in doomed:
                del self._store[k]
            if doomed:
                logger.info(f"[CACHE] Invalidated {len(doomed)} entries with prefix {key_or_prefix!r}")
            return len(doomed)

    def stats(self) -> CacheStats:
        with self._lock:
            now = self._clock()
            expired = sum(1 for entry in self._store.values() if entry.is_expired(now))
            size = len(self._store)
        return CacheStats(
            size=size,
            max_size=self._max_entries,
            expired=expired,
            utilization=math.floor(size * 100 / self._max_entries + 0.5),
        )

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._store.clear()

    def entry(self, key: str) -> Optional[CacheEntry]:
        """Return the raw entry for ``key`` without counting a hit or checking expiry."""
        with self._lock:
            return self._store.get(key)

    def _evict(self) -> None:
        """Drop the least-read entries if the store is over capacity.

        The sort is stable, so entries with equal hit counts go in insertion
        order.
        """
        if len(self._store) <= self._max_entries:
            return
        ranked = sorted(self._store.values(), key=lambda entry: entry.hits)
        for entry in ranked[: self._evict_count]:
            del self._store[entry.key]
        logger.info(
            f"[CACHE] Evicted {min(len(ranked), self._evict_count)} entries, "
            f"{len(self._store)} remain"
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    @property
    def max_entries(self) -> int:
        """Get the configured capacity."""
        return self._max_entries


# Process-wide instance
_cache_service: LocalCacheService | None = None
_cache_service_lock = threading.Lock()


def get_cache_service() -> LocalCacheService:
    """Return the process-wide cache, building it from settings on first use."""
    global _cache_service
    if _cache_service is None:
        with _cache_service_lock:
            if _cache_service is None:
                settings = load_settings()
                _cache_service = LocalCacheService(
                    max_entries=settings.max_entries,
                    eviction_ratio=settings.eviction_ratio,
                )
                logger.info(f"[CACHE] Local cache ready: max_entries={settings.max_entries}")
    return _cache_service


def reset_cache_service() -> None:
    """Discard the process-wide cache. The next access builds a fresh one."""
    global _cache_service
    with _cache_service_lock:
        _cache_service = None


def cache_get(key: str) -> Any | None:
    return get_cache_service().get(key)


def cache_set(key: str, value: Any, ttl_seconds: float = 60) -> None:
    get_cache_service().set(key, value, ttl_seconds)


def cache_delete(key_or_prefix: str, is_prefix: bool = False) -> int:
    return get_cache_service().delete(key_or_prefix, is_prefix)


def cache_stats() -> CacheStats:
    return get_cache_service().stats()


async def cache_through(key: str, ttl_seconds: float, compute: Compute) -> Any:
    return await get_cache_service().cache_through(key, ttl_seconds, compute)
