"""Core data models for ReelCache.

This module contains the Pydantic models shared by the cache store, the
edge cache-policy emitter and the HTTP layer: catalog films, cache
statistics and CDN cache policies.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Film(BaseModel):
    """A published film as listed in the catalog."""

    id: str = Field(..., min_length=1, description="Film identifier")
    title: str = Field(..., min_length=1, description="Display title")
    genre: str = Field(..., description="Primary genre, lowercase")
    views: int = Field(default=0, ge=0, description="Lifetime view count")
    release_year: Optional[int] = Field(None, description="Year of release")
    created_at: Optional[datetime] = Field(
        None, description="When the film was added to the catalog"
    )


class CacheStats(BaseModel):
    """Point-in-time snapshot of a local cache store.

    ``expired`` counts entries that are past their expiry but have not been
    reaped yet (expiry is lazy).
    """

    size: int = Field(..., ge=0, description="Entries physically in the store")
    max_size: int = Field(..., ge=1, description="Configured capacity")
    expired: int = Field(..., ge=0, description="Entries already past expiry")
    utilization: int = Field(..., description="round(size / max_size * 100)")


class CachePolicy(BaseModel):
    """How long downstream caches may keep a response.

    A policy with both ``edge`` and ``browser`` at zero means "never cache".
    Durations are formatted as given; negative values are not rejected.
    """

    model_config = ConfigDict(frozen=True)

    edge: int = Field(..., description="CDN/edge cache lifetime in seconds")
    browser: int = Field(..., description="Browser cache lifetime in seconds")
    stale_while_revalidate: Optional[int] = Field(
        None, description="Seconds a stale response may be served while refreshing"
    )
    vary_auth: bool = Field(
        default=False, description="Whether the response differs per authenticated user"
    )
