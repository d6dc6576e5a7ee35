"""Shared pytest fixtures."""

import pytest

from reelcache.api import routes
from reelcache.services import reset_cache_service


class FakeClock:
    """Manually advanced clock in epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def fresh_process_state(monkeypatch, tmp_path):
    """Give every test its own process-wide cache and catalog."""
    # keep a developer .env out of the tests
    monkeypatch.chdir(tmp_path)
    for name in (
        "REELCACHE_MAX_ENTRIES",
        "REELCACHE_EVICTION_RATIO",
        "REELCACHE_ADMIN_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_cache_service()
    routes._catalog = None
    yield
    reset_cache_service()
    routes._catalog = None
