"""ReelCache Services.

Service layer components:
- Cache: process-local TTL cache with hit-count eviction
- CDN: cache-control header policies for the edge and browsers
- Catalog: film listing source behind the cached routes
"""

from .cache import (
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
from .cdn import CDNPolicies, apply_cache_headers, build_cache_headers
from .catalog import FilmCatalog, InMemoryFilmCatalog

__all__ = [
    # Cache
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
    # CDN
    "CDNPolicies",
    "apply_cache_headers",
    "build_cache_headers",
    # Catalog
    "FilmCatalog",
    "InMemoryFilmCatalog",
]
