"""API routes for ReelCache.

Each handler composes the two caching layers:
- Local cache: keyed by route + query parameters, skips repeated catalog queries
- CDN headers: tell the edge and browsers how long they may keep the response

The layers never call each other; handlers pick a TTL and a policy per
data category.
"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Response
from pydantic import BaseModel

from reelcache.config import load_settings
from reelcache.models import AppError, AppException, CacheStats, ErrorCode, Film
from reelcache.services import (
    CacheTTL,
    CDNPolicies,
    FilmCatalog,
    InMemoryFilmCatalog,
    LocalCacheService,
    apply_cache_headers,
    get_cache_service,
)
from reelcache.utils.cache import build_cache_key, cache_prefix

logger = logging.getLogger(__name__)

router = APIRouter()

FILMS_ROUTE = "films"
MAX_FILMS_LIMIT = 50
DEFAULT_FILMS_LIMIT = 20


# Request/Response models
class FilmListResponse(BaseModel):
    """Response model for the catalog listing."""
    success: bool
    data: list[Film] = []
    cached: bool = False
    error: Optional[AppError] = None


class CacheStatsResponse(BaseModel):
    """Response model for cache statistics."""
    success: bool
    stats: CacheStats


class InvalidateResponse(BaseModel):
    """Response model for cache invalidation."""
    success: bool
    removed: int


# Service instances
_catalog: FilmCatalog | None = None


def get_catalog() -> FilmCatalog:
    global _catalog
    if _catalog is None:
        _catalog = InMemoryFilmCatalog()
    return _catalog


def get_cache() -> LocalCacheService:
    return get_cache_service()


def clamp_limit(raw: Optional[str]) -> int:
    """Parse a requested page size and clamp it to 1..MAX_FILMS_LIMIT.

    Missing, non-numeric and non-positive values fall back to
    DEFAULT_FILMS_LIMIT.
    """
    try:
        limit = int(raw.strip()) if raw is not None else 0
    except ValueError:
        limit = 0
    if limit < 1:
        return DEFAULT_FILMS_LIMIT
    return min(limit, MAX_FILMS_LIMIT)


@router.get("/films", response_model=FilmListResponse)
async def list_films(
    response: Response,
    genre: Optional[str] = Query(None, max_length=64),
    limit: Optional[str] = Query(None, max_length=16),
    catalog: FilmCatalog = Depends(get_catalog),
    cache: LocalCacheService = Depends(get_cache),
) -> FilmListResponse:
    """List published films, most viewed first.

    Served from the local cache when warm; otherwise the catalog is queried
    and the result cached for ``CacheTTL.CATALOG`` seconds.
    """
    limit = clamp_limit(limit)
    cache_key = build_cache_key(FILMS_ROUTE, genre=genre, limit=limit)

    computed = False

    async def compute() -> list[dict]:
        nonlocal computed
        computed = True
        films = await catalog.list_films(genre, limit)
        return [f.model_dump(mode="json") for f in films]

    try:
        data = await cache.cache_through(cache_key, CacheTTL.CATALOG, compute)
    except Exception as e:
        logger.error(f"[API] Catalog query failed: {e}")
        raise AppException(
            AppError(
                code=ErrorCode.API_ERROR,
                message=str(e),
                user_message="Could not load films. Please try again.",
            ),
            status_code=500,
        ) from e

    apply_cache_headers(response, CDNPolicies.CATALOG)
    return FilmListResponse(success=True, data=data, cached=not computed)


@router.get("/cache/stats", response_model=CacheStatsResponse)
def get_cache_stats(
    response: Response,
    cache: LocalCacheService = Depends(get_cache),
) -> CacheStatsResponse:
    """Report local cache size, capacity and pending expirations."""
    apply_cache_headers(response, CDNPolicies.PRIVATE)
    return CacheStatsResponse(success=True, stats=cache.stats())


@router.delete("/cache", response_model=InvalidateResponse)
def invalidate_cache(
    response: Response,
    key: Optional[str] = Query(None, min_length=1),
    prefix: Optional[str] = Query(None, min_length=1),
    route: Optional[str] = Query(None, min_length=1, max_length=64),
    x_admin_token: Optional[str] = Header(None),
    cache: LocalCacheService = Depends(get_cache),
) -> InvalidateResponse:
    """Invalidate one key, every key under a prefix, or every key of a route.

    ``route`` expands to the prefix shared by that route's keys, so
    ``route=films`` drops every cached catalog listing.

    Other instances keep their own copies until they expire.
    """
    admin_token = load_settings().admin_token
    if admin_token and not hmac.compare_digest(
        (x_admin_token or "").encode(), admin_token.encode()
    ):
        raise AppException(
            AppError(
                code=ErrorCode.FORBIDDEN,
                message="Missing or invalid admin token",
                user_message="You are not allowed to do that.",
            ),
            status_code=403,
        )

    if sum(target is not None for target in (key, prefix, route)) != 1:
        raise AppException(
            AppError(
                code=ErrorCode.INVALID_INPUT,
                message="Exactly one of 'key', 'prefix' or 'route' is required",
                user_message="Specify either a cache key, a prefix or a route.",
            ),
            status_code=400,
        )

    if route is not None:
        prefix = cache_prefix(route)

    if prefix is not None:
        removed = cache.delete(prefix, is_prefix=True)
    else:
        removed = cache.delete(key)

    logger.info(f"[API] Invalidated {removed} cache entries ({'prefix' if prefix else 'key'}={prefix or key})")
    apply_cache_headers(response, CDNPolicies.NO_CACHE)
    return InvalidateResponse(success=True, removed=removed)
