"""Tests for the HTTP layer.

Covers how the routes compose the local cache with the CDN headers.
"""

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from reelcache.api import routes
from reelcache.main import app
from reelcache.models import Film
from reelcache.services import InMemoryFilmCatalog, LocalCacheService, get_cache_service
from reelcache.services.cdn import NO_STORE

CATALOG_CACHE_CONTROL = "public, max-age=60, s-maxage=300, stale-while-revalidate=600"


def vary_tokens(response) -> list[str]:
    """Split Vary; CORS middleware may append Origin."""
    return response.headers["vary"].split(", ")


class FailingCatalog(InMemoryFilmCatalog):
    async def list_films(self, genre: Optional[str], limit: int) -> list[Film]:
        self.query_count += 1
        raise ConnectionError("database unavailable")


@pytest.fixture
def catalog() -> InMemoryFilmCatalog:
    routes._catalog = InMemoryFilmCatalog()
    return routes._catalog


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


class TestListFilms:
    """Tests for GET /api/films."""

    def test_first_request_queries_catalog(self, client, catalog) -> None:
        response = client.get("/api/films", params={"genre": "comedy", "limit": 2})
        body = response.json()

        assert response.status_code == 200
        assert body["success"] is True
        assert body["cached"] is False
        assert [f["title"] for f in body["data"]] == ["The Wedding Party", "Omo Ghetto"]
        assert catalog.query_count == 1

    def test_repeat_request_served_from_cache(self, client, catalog) -> None:
        client.get("/api/films", params={"genre": "comedy"})
        response = client.get("/api/films", params={"genre": "Comedy "})

        assert response.json()["cached"] is True
        assert catalog.query_count == 1
        assert get_cache_service().entry("films:genre=comedy:limit=20").hits == 1

    def test_catalog_headers(self, client, catalog) -> None:
        response = client.get("/api/films")
        assert response.headers["cache-control"] == CATALOG_CACHE_CONTROL
        assert response.headers["cdn-cache-control"] == "max-age=300"
        assert "Accept-Encoding" in vary_tokens(response)
        assert "Authorization" not in vary_tokens(response)

        cached = client.get("/api/films")
        assert cached.headers["cache-control"] == CATALOG_CACHE_CONTROL

    def test_limit_is_clamped(self, client, catalog) -> None:
        client.get("/api/films", params={"limit": 500})
        client.get("/api/films", params={"limit": 0})
        cache = get_cache_service()
        assert "films:genre=anon:limit=50" in cache
        assert "films:genre=anon:limit=20" in cache

    @pytest.mark.parametrize("raw", ["abc", "", " 7x", "-3"])
    def test_unparseable_limit_uses_default(self, client, catalog, raw) -> None:
        response = client.get("/api/films", params={"limit": raw})
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert "films:genre=anon:limit=20" in get_cache_service()

    def test_limit_with_whitespace(self, client, catalog) -> None:
        client.get("/api/films", params={"limit": " 3 "})
        assert "films:genre=anon:limit=3" in get_cache_service()

    def test_invalid_query_uses_error_envelope(self, client, catalog) -> None:
        response = client.get("/api/films", params={"genre": "x" * 65})
        body = response.json()

        assert response.status_code == 422
        assert body["success"] is False
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert "detail" not in body
        assert response.headers["cache-control"] == NO_STORE
        assert catalog.query_count == 0

    def test_distinct_params_are_cached_separately(self, client, catalog) -> None:
        client.get("/api/films", params={"genre": "drama"})
        client.get("/api/films", params={"genre": "thriller"})
        assert catalog.query_count == 2
        assert get_cache_service().stats().size == 2

    def test_catalog_failure_is_not_cached(self, client) -> None:
        routes._catalog = FailingCatalog()
        response = client.get("/api/films")
        body = response.json()

        assert response.status_code == 500
        assert body["success"] is False
        assert body["error"]["code"] == "API_ERROR"
        assert "database unavailable" in body["error"]["message"]
        assert response.headers["cache-control"] == NO_STORE
        assert get_cache_service().stats().size == 0

        client.get("/api/films")
        assert routes._catalog.query_count == 2


class TestCacheStats:
    """Tests for GET /api/cache/stats."""

    def test_reports_store_state(self, client, catalog) -> None:
        client.get("/api/films")
        response = client.get("/api/cache/stats")
        body = response.json()

        assert body["success"] is True
        assert body["stats"] == {"size": 1, "max_size": 500, "expired": 0, "utilization": 0}

    def test_private_headers(self, client) -> None:
        response = client.get("/api/cache/stats")
        assert response.headers["cache-control"] == NO_STORE
        assert response.headers["pragma"] == "no-cache"
        assert "Accept-Encoding" in vary_tokens(response)
        assert "Authorization" in vary_tokens(response)


class TestInvalidateCache:
    """Tests for DELETE /api/cache."""

    def test_prefix_invalidation(self, client, catalog) -> None:
        client.get("/api/films", params={"genre": "drama"})
        client.get("/api/films", params={"genre": "comedy"})
        get_cache_service().set("profile:u1", {"name": "Ada"})

        response = client.delete("/api/cache", params={"prefix": "films:"})
        assert response.status_code == 200
        assert response.json() == {"success": True, "removed": 2}
        assert "profile:u1" in get_cache_service()

        client.get("/api/films", params={"genre": "drama"})
        assert catalog.query_count == 3

    def test_exact_key_invalidation(self, client) -> None:
        get_cache_service().set("profile:u1", 1)
        response = client.delete("/api/cache", params={"key": "profile:u1"})
        assert response.json()["removed"] == 1

        response = client.delete("/api/cache", params={"key": "profile:u1"})
        assert response.json()["removed"] == 0

    def test_route_invalidation(self, client, catalog) -> None:
        client.get("/api/films", params={"genre": "drama"})
        client.get("/api/films", params={"limit": 5})
        get_cache_service().set("films_admin:x", 1)

        response = client.delete("/api/cache", params={"route": "Films"})
        assert response.json() == {"success": True, "removed": 2}
        assert "films_admin:x" in get_cache_service()

    @pytest.mark.parametrize(
        "params",
        [{}, {"key": "a", "prefix": "b"}, {"key": "a", "route": "films"}],
    )
    def test_requires_exactly_one_target(self, client, params) -> None:
        response = client.delete("/api/cache", params=params)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_INPUT"

    def test_wrong_admin_token_rejected(self, client, monkeypatch) -> None:
        monkeypatch.setenv("REELCACHE_ADMIN_TOKEN", "s3cret")
        get_cache_service().set("profile:u1", 1)

        response = client.delete(
            "/api/cache",
            params={"key": "profile:u1"},
            headers={"X-Admin-Token": "s3cre"},
        )
        assert response.status_code == 403
        assert "profile:u1" in get_cache_service()

    def test_admin_token_enforced(self, client, monkeypatch) -> None:
        monkeypatch.setenv("REELCACHE_ADMIN_TOKEN", "s3cret")
        get_cache_service().set("profile:u1", 1)

        denied = client.delete("/api/cache", params={"key": "profile:u1"})
        assert denied.status_code == 403
        assert denied.json()["error"]["code"] == "FORBIDDEN"
        assert "profile:u1" in get_cache_service()

        allowed = client.delete(
            "/api/cache",
            params={"key": "profile:u1"},
            headers={"X-Admin-Token": "s3cret"},
        )
        assert allowed.status_code == 200
        assert allowed.json()["removed"] == 1


class BrokenCache(LocalCacheService):
    def stats(self):
        raise RuntimeError("stats unavailable")


class TestUnhandledErrors:
    """Tests for the catch-all error handler."""

    def test_unexpected_error_is_not_cacheable(self) -> None:
        app.dependency_overrides[routes.get_cache] = lambda: BrokenCache()
        try:
            client = TestClient(app, raise_server_exceptions=False)
            response = client.get("/api/cache/stats")
        finally:
            app.dependency_overrides.clear()
        body = response.json()

        assert response.status_code == 500
        assert body["success"] is False
        assert body["error"]["code"] == "API_ERROR"
        assert response.headers["cache-control"] == NO_STORE
        assert response.headers["pragma"] == "no-cache"


class TestHealth:
    """Tests for GET /health."""

    def test_health_includes_cache_stats(self, client) -> None:
        get_cache_service().set("config:site", {"ads": True})
        response = client.get("/health")
        body = response.json()

        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["cache"]["size"] == 1
        assert response.headers["cache-control"] == NO_STORE
