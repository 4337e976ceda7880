# tests/conftest.py - shared pytest fixtures
import asyncio
import random
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from gh_explorer.core.config import FetcherSettings
from gh_explorer.remote.github_client import ApiResponse
from gh_explorer.services.fetch_service import RepositoryFetcher
from gh_explorer.storage import MemoryStore

START_TIME = 1_700_000_000.0


# ========================================
# Test data helpers
# ========================================


def make_item(full_name: str, stars: int = 5000, **overrides: Any) -> dict[str, Any]:
    """Raw search API item"""
    item = {
        "full_name": full_name,
        "stargazers_count": stars,
        "forks_count": 100,
        "open_issues_count": 10,
        "watchers_count": stars,
        "archived": False,
        "disabled": False,
        "html_url": f"https://github.com/{full_name}",
        "created_at": "2015-01-01T00:00:00Z",
        "updated_at": "2024-01-01T00:00:00Z",
        "language": "Python",
        "description": f"{full_name} description",
    }
    item.update(overrides)
    return item


def search_body(*items: dict[str, Any]) -> dict[str, Any]:
    return {"total_count": len(items), "incomplete_results": False, "items": list(items)}


def rate_headers(remaining: int = 4999, reset: int = 1_700_003_600, limit: int = 5000):
    return {
        "x-ratelimit-limit": str(limit),
        "x-ratelimit-remaining": str(remaining),
        "x-ratelimit-reset": str(reset),
    }


def search_response(*items, status: int = 200, etag: str | None = '"etag-1"', **headers):
    response_headers = {**rate_headers(), **headers}
    if etag:
        response_headers["etag"] = etag
    body = search_body(*items) if status == 200 else None
    return ApiResponse(status=status, headers=response_headers, body=body)


def quota_response(remaining: int = 4000, reset: int = 1_700_003_600, limit: int = 5000):
    return ApiResponse(
        status=200,
        headers={},
        body={"rate": {"limit": limit, "remaining": remaining, "reset": reset}},
    )


class FakeClock:
    """Controllable wall clock in epoch seconds"""

    def __init__(self, now: float = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


SAMPLE_ITEMS = [make_item("psf/requests", 50000), make_item("pallets/flask", 65000)]


@pytest.fixture
def factories() -> SimpleNamespace:
    """Builders for raw API payloads"""
    return SimpleNamespace(
        make_item=make_item,
        search_body=search_body,
        rate_headers=rate_headers,
        search_response=search_response,
        quota_response=quota_response,
        sample_items=[dict(item) for item in SAMPLE_ITEMS],
    )


# ========================================
# Fixtures
# ========================================


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> FetcherSettings:
    """Small timings so nothing in the suite waits long"""
    return FetcherSettings(
        min_stars=1000,
        fetch_timeout=1000,
        max_retries=3,
        retry_delay=100,
        cache_duration=60000,
        max_cache_size=3,
        rate_check_threshold=60000,
        rate_check_timeout=50,
        warning_duration=50,
        db_path=":memory:",
        languages=["Python", "Go", "Rust"],
    )


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def mock_github_client() -> MagicMock:
    """GitHub client double returning canned ApiResponse objects"""
    client = MagicMock()
    client.search_repositories = AsyncMock(return_value=search_response(*SAMPLE_ITEMS))
    client.fetch_rate_limit = AsyncMock(return_value=quota_response())
    client.close = AsyncMock()
    return client


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Backoff sleep that records delays instead of waiting"""
    return AsyncMock()


@pytest.fixture
def build_test_fetcher(settings, mock_github_client, memory_store, fake_clock, no_sleep):
    def _build(**overrides) -> RepositoryFetcher:
        kwargs = {
            "settings": settings,
            "client": mock_github_client,
            "store": memory_store,
            "clock": fake_clock,
            "sleep": no_sleep,
            "rng": random.Random(0),
        }
        kwargs.update(overrides)
        return RepositoryFetcher(**kwargs)

    return _build


@pytest_asyncio.fixture
async def fetcher(build_test_fetcher):
    fetcher = build_test_fetcher()
    yield fetcher
    await fetcher.aclose()
    # Let cancelled background tasks settle before the loop closes
    await asyncio.sleep(0)


# ========================================
# pytest設定
# ========================================


def pytest_configure(config):
    """pytest設定"""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
