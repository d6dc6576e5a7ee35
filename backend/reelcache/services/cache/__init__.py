"""Cache service module.

Process-local response cache with TTL expiry and hit-count eviction.
"""

from .service import (
    CacheEntry,
    CacheService,
    CacheTTL,
    LocalCacheService,
    cache_delete,
    cache_get,
    cache_set,
    cache_stats,
    cache_through,
    get_cache_service,
    reset_cache_service,
)

__all__ = [
    "CacheEntry",
    "CacheService",
    "CacheTTL",
    "LocalCacheService",
    "cache_delete",
    "cache_get",
    "cache_set",
    "cache_stats",
    "cache_through",
    "get_cache_service",
    "reset_cache_service",
]
