"""
Unit tests for RepositoryFetcher
"""

import asyncio
from unittest.mock import AsyncMock, call

import pytest

from gh_explorer.core.exceptions import (
    ConnectivityError,
    HttpError,
    InvalidResponseData,
    RateLimitExhausted,
    StorageError,
)
from gh_explorer.remote.github_client import ApiResponse
from gh_explorer.services.fetch_service import OFFLINE_MESSAGE, PREFETCH_MESSAGE


def blocking_search(factories):
    """Search double that waits for release before answering"""
    release = asyncio.Event()

    async def search(params, etag=None):
        await release.wait()
        return factories.search_response(*factories.sample_items)

    return AsyncMock(side_effect=search), release


class TestFetchRandomRepository:
    """Test the main fetch flow"""

    @pytest.mark.asyncio
    async def test_cache_miss_fetches_and_caches(self, fetcher, mock_github_client, factories):
        repository = await fetcher.fetch_random_repository("Python")

        names = [item["full_name"] for item in factories.sample_items]
        assert repository.full_name in names
        assert fetcher.current_repository is repository
        assert fetcher.current_language == "Python"
        assert fetcher.cache.get("Python") is not None
        assert fetcher.status.loading is False
        assert fetcher.status.snapshot()["repository"]["full_name"] == repository.full_name

        params = mock_github_client.search_repositories.await_args.args[0]
        assert params["q"] == "language:Python stars:>=1000"
        assert mock_github_client.search_repositories.await_args.kwargs["etag"] is None

    @pytest.mark.asyncio
    async def test_fresh_cache_skips_network(self, fetcher, mock_github_client, fake_clock):
        await fetcher.fetch_random_repository("Python")
        fake_clock.advance(59)

        await fetcher.fetch_random_repository("Python")

        assert mock_github_client.search_repositories.await_count == 1

    @pytest.mark.asyncio
    async def test_stale_cache_revalidates_with_etag(
        self, fetcher, mock_github_client, fake_clock
    ):
        await fetcher.fetch_random_repository("Python")
        fake_clock.advance(61)

        await fetcher.fetch_random_repository("Python")

        assert mock_github_client.search_repositories.await_count == 2
        assert mock_github_client.search_repositories.await_args.kwargs["etag"] == '"etag-1"'

    @pytest.mark.asyncio
    async def test_fetch_in_progress_is_ignored(self, fetcher, mock_github_client, factories):
        mock_github_client.search_repositories, release = blocking_search(factories)

        first = asyncio.create_task(fetcher.fetch_random_repository("Python"))
        await asyncio.sleep(0)

        assert fetcher.is_fetching is True
        assert fetcher.status.controls_enabled is False
        assert await fetcher.fetch_random_repository("Go") is None

        release.set()
        assert await first is not None
        assert fetcher.is_fetching is False
        assert fetcher.current_language == "Python"

    @pytest.mark.asyncio
    async def test_invalid_data_is_not_cached(self, fetcher, mock_github_client, factories):
        mock_github_client.search_repositories.return_value = factories.search_response(
            factories.make_item("tiny/repo", 5)
        )

        with pytest.raises(InvalidResponseData):
            await fetcher.fetch_random_repository("Python")

        assert fetcher.cache.get("Python") is None
        assert fetcher.status.error == "No repositories found."
        assert fetcher.status.loading is False
        assert fetcher.is_fetching is False
        mock_github_client.search_repositories.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_http_error_retried_then_surfaced(
        self, fetcher, mock_github_client, factories, no_sleep
    ):
        mock_github_client.search_repositories.return_value = ApiResponse(
            status=500, headers=factories.rate_headers()
        )

        with pytest.raises(HttpError):
            await fetcher.fetch_random_repository("Python")

        assert mock_github_client.search_repositories.await_count == 4
        assert no_sleep.await_args_list == [call(0.1), call(0.2), call(0.4)]
        assert fetcher.status.error == "HTTP error! status: 500"

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(self, fetcher, mock_github_client, factories):
        mock_github_client.search_repositories.side_effect = [
            ApiResponse(status=502, headers={}),
            factories.search_response(*factories.sample_items),
        ]

        assert await fetcher.fetch_random_repository("Python") is not None
        assert fetcher.status.error is None

    @pytest.mark.asyncio
    async def test_exhausted_quota_disables_fetching(
        self, fetcher, mock_github_client, factories
    ):
        mock_github_client.search_repositories.return_value = ApiResponse(
            status=403, headers=factories.rate_headers(remaining=0, reset=1_700_003_600)
        )

        with pytest.raises(RateLimitExhausted):
            await fetcher.fetch_random_repository("Python")

        mock_github_client.search_repositories.assert_awaited_once()
        assert fetcher.status.fetch_allowed is False
        assert fetcher.status.error.startswith("Rate limit exceeded. Wait 60 minutes until ")

        # Further requests fail fast without touching the network
        with pytest.raises(RateLimitExhausted):
            await fetcher.fetch_random_repository("Python")
        mock_github_client.search_repositories.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_offline_fails_fast(self, fetcher, mock_github_client):
        fetcher.handle_connectivity_change(False)

        with pytest.raises(ConnectivityError):
            await fetcher.fetch_random_repository("Python")

        mock_github_client.search_repositories.assert_not_awaited()
        assert fetcher.status.error == OFFLINE_MESSAGE

    @pytest.mark.asyncio
    async def test_not_modified_returns_cached_page(
        self, fetcher, mock_github_client, factories, fake_clock
    ):
        await fetcher.fetch_random_repository("Python")
        cached_items = fetcher.cache.get("Python").data.items
        fake_clock.advance(61)
        mock_github_client.search_repositories.return_value = ApiResponse(
            status=304, headers={**factories.rate_headers(remaining=3999), "etag": '"etag-1"'}
        )

        page = await fetcher.fetch_repositories("Python")

        entry = fetcher.cache.get("Python")
        assert page.items == cached_items
        assert entry.timestamp == fetcher.cache.now_ms()
        assert entry.etag == '"etag-1"'
        assert fetcher.rate_limit.state.remaining == 3999

    @pytest.mark.asyncio
    async def test_not_modified_without_cache_is_an_error(
        self, fetcher, mock_github_client, factories
    ):
        mock_github_client.search_repositories.return_value = ApiResponse(
            status=304, headers=factories.rate_headers()
        )

        with pytest.raises(HttpError) as exc_info:
            await fetcher.fetch_repositories("Python")

        assert exc_info.value.status == 304

    @pytest.mark.asyncio
    async def test_revalidation_falls_back_to_memory(
        self, fetcher, mock_github_client, factories, fake_clock
    ):
        await fetcher.fetch_random_repository("Python")
        fake_clock.advance(61)
        fetcher.cache.load_persisted = AsyncMock(side_effect=StorageError("locked"))
        mock_github_client.search_repositories.return_value = ApiResponse(
            status=304, headers=factories.rate_headers()
        )

        assert await fetcher.fetch_random_repository("Python") is not None
        assert mock_github_client.search_repositories.await_args.kwargs["etag"] == '"etag-1"'


class TestFetchRepositories:
    """Test deduplicated fetches"""

    @pytest.mark.asyncio
    async def test_concurrent_fetches_share_one_call(self, fetcher, mock_github_client, factories):
        mock_github_client.search_repositories, release = blocking_search(factories)

        waiters = asyncio.gather(*(fetcher.fetch_repositories("Python") for _ in range(3)))
        await asyncio.sleep(0)
        release.set()
        pages = await waiters

        mock_github_client.search_repositories.assert_awaited_once()
        assert pages[0] is pages[1] is pages[2]

    def test_request_key(self, build_test_fetcher):
        assert build_test_fetcher().request_key("Go") == "Go-1000"


class TestPrefetchAndLanguage:
    """Test prefetch, language selection and lifecycle events"""

    @pytest.mark.asyncio
    async def test_prefetch_shows_loading_message(self, fetcher, mock_github_client, factories):
        mock_github_client.search_repositories, release = blocking_search(factories)

        task = asyncio.create_task(fetcher.prefetch_repositories("Go"))
        await asyncio.sleep(0)
        assert fetcher.status.loading_message == PREFETCH_MESSAGE

        release.set()
        assert await task is True
        assert fetcher.status.loading is False
        assert fetcher.cache.get("Go") is not None

    @pytest.mark.asyncio
    async def test_prefetch_failure_is_swallowed(self, fetcher, mock_github_client):
        mock_github_client.search_repositories.return_value = ApiResponse(status=200, body={})

        assert await fetcher.prefetch_repositories("Go") is False
        assert fetcher.status.loading is False

    @pytest.mark.asyncio
    async def test_select_language_prefetches_missing(self, fetcher, mock_github_client):
        task = await fetcher.select_language("Rust")

        assert task is not None
        assert await task is True
        assert fetcher.current_language == "Rust"
        assert fetcher.cache.get("Rust") is not None

    @pytest.mark.asyncio
    async def test_select_language_skips_fresh(self, fetcher, mock_github_client):
        await fetcher.prefetch_repositories("Rust")

        assert await fetcher.select_language("Rust") is None
        mock_github_client.search_repositories.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_select_empty_language(self, fetcher):
        assert await fetcher.select_language("") is None

    @pytest.mark.asyncio
    async def test_refresh_uses_current_language(self, fetcher, mock_github_client):
        assert await fetcher.refresh() is None

        await fetcher.fetch_random_repository("Python")
        repository = await fetcher.refresh()

        assert repository is not None
        mock_github_client.search_repositories.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cache_expiration_refreshes_current_language(
        self, fetcher, mock_github_client, fake_clock
    ):
        await fetcher.fetch_random_repository("Python")
        fake_clock.advance(61)

        expired = await fetcher.check_cache_expiration()
        await fetcher.scheduler.drain()

        assert expired == ["Python"]
        assert mock_github_client.search_repositories.await_count == 2
        assert fetcher.cache.is_fresh(fetcher.cache.get("Python"))

    @pytest.mark.asyncio
    async def test_visibility_checks_rate_limit(self, fetcher, mock_github_client):
        assert await fetcher.handle_visibility_change(False) is None
        mock_github_client.fetch_rate_limit.assert_not_awaited()

        state = await fetcher.handle_visibility_change(True)

        assert state.remaining == 4000
        mock_github_client.fetch_rate_limit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connectivity_restored(self, fetcher):
        fetcher.handle_connectivity_change(False)
        assert fetcher.status.fetch_allowed is False

        fetcher.handle_connectivity_change(True)

        assert fetcher.status.fetch_allowed is True
        assert fetcher.status.error is None

    @pytest.mark.asyncio
    async def test_aclose_releases_resources(self, build_test_fetcher, mock_github_client):
        fetcher = build_test_fetcher()

        await fetcher.aclose()

        mock_github_client.close.assert_awaited_once()
        with pytest.raises(RuntimeError):
            await fetcher.select_language("Go")
