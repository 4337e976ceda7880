"""
Fetch Service - answers "give me a repository for language L"

This service composes:
- CacheManager: fresh memory entries are served without network
- RequestDeduplicator: one search call per (language, min stars) at a time
- RetryExecutor: per-attempt timeout and exponential backoff
- RateLimitService: quota bookkeeping from every response
- StatusBoard: user-visible loading / warning / error / repository state
"""

import asyncio
import random
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from ..core.config import FetcherSettings, load_settings
from ..core.exceptions import (
    ConnectivityError,
    GHExplorerException,
    HttpError,
    InvalidResponseData,
    RateLimitExhausted,
    StorageError,
)
from ..core.logging_config import get_logger, log_with_context
from ..core.scheduler import TaskScheduler
from ..domain.models import CacheEntry, RateLimitState, Repository, RepositoryPage
from ..domain.repositories import PersistentStore
from ..remote.github_client import ApiResponse, GitHubClient, build_search_params
from ..storage import SQLiteStore
from .analytics_service import AnalyticsService
from .cache_service import CacheManager
from .rate_limit_service import RateLimitService
from .request_dedup import RequestDeduplicator
from .retry_executor import RetryExecutor
from .status_service import StatusBoard

logger = get_logger(__name__)

OFFLINE_MESSAGE = "You are offline. Please check your internet connection."
PREFETCH_MESSAGE = "Prefetching repositories..."
DEFAULT_ERROR_MESSAGE = "Failed to fetch repository."


class SearchClient(Protocol):
    async def search_repositories(
        self, params: dict[str, str], etag: str | None = None
    ) -> ApiResponse: ...

    async def fetch_rate_limit(self) -> ApiResponse: ...

    async def close(self) -> None: ...


@dataclass
class FetchResult:
    """Outcome of one successful search attempt"""

    page: RepositoryPage
    etag: str | None
    not_modified: bool = False


class RepositoryFetcher:
    """Fetch orchestration for the explorer"""

    def __init__(
        self,
        settings: FetcherSettings,
        client: SearchClient,
        store: PersistentStore,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: random.Random | None = None,
    ):
        self.settings = settings
        self.client = client
        self.store = store
        self._clock = clock
        self._rng = rng or random.Random()

        self.scheduler = TaskScheduler()
        self.status = StatusBoard(self.scheduler, settings.warning_duration)
        self.analytics = AnalyticsService(store, clock)
        self.cache = CacheManager(
            store, self.analytics, settings.max_cache_size, settings.cache_duration, clock
        )
        self.rate_limit = RateLimitService(
            client,
            self.status,
            self.analytics,
            self.scheduler,
            warning_threshold=settings.rate_warning_threshold,
            check_threshold_ms=settings.rate_check_threshold,
            check_timeout_ms=settings.rate_check_timeout,
            clock=clock,
        )
        self.retry = RetryExecutor(
            settings.max_retries, settings.retry_delay, settings.fetch_timeout, sleep=sleep
        )
        self._requests = RequestDeduplicator(name="search")

        self._in_progress = False
        self.current_language = ""
        self.repositories: list[dict] = []

    @property
    def is_fetching(self) -> bool:
        return self._in_progress

    @property
    def current_repository(self) -> Repository | None:
        return self.status.current_repository

    def request_key(self, language: str) -> str:
        # TODO: add page size and sort order if they become runtime-configurable
        return f"{language}-{self.settings.min_stars}"

    def search_params(self, language: str) -> dict[str, str]:
        return build_search_params(language, self.settings.min_stars, self.settings.page_size)

    async def fetch_random_repository(self, language: str) -> Repository | None:
        """
        Pick a random repository for language

        Args:
            language: Language label as used by the search API

        Returns:
            The selected repository, or None if a fetch is already in progress

        Raises:
            ConnectivityError: If offline
            RateLimitExhausted: If fetching is disabled until the quota resets
            GHExplorerException: Any fetch or validation failure (also shown as error)
        """
        if self._in_progress:
            logger.info(f"Fetch already in progress, ignoring request for {language}")
            return None

        if not self.status.fetch_allowed:
            # The reason is already on display
            if not self.status.online:
                raise ConnectivityError(OFFLINE_MESSAGE)
            raise RateLimitExhausted(self.rate_limit.state.reset)

        self._in_progress = True
        self.current_language = language
        self.status.set_loading(True)
        self.status.hide_error()
        self.status.hide_repository()
        started = time.perf_counter()

        try:
            entry = self.cache.get(language)
            if entry is not None:
                log_with_context(
                    logger,
                    "info",
                    f"Cache hit for {language}",
                    language=language,
                    age_seconds=entry.age_ms(self.cache.now_ms()) / 1000,
                )
            else:
                logger.info(f"Cache miss for {language}")

            if entry is not None and self.cache.is_fresh(entry):
                page = entry.data
            else:
                page = await self.fetch_repositories(language)

            if page.is_empty():
                raise InvalidResponseData("No repositories found.")

            self.repositories = page.items
            repository = Repository.from_api(self._rng.choice(page.items))
            self.status.show_repository(repository)
            return repository
        except Exception as e:
            # Keep the tracker's exhaustion notice, it names the reset time
            if not (isinstance(e, RateLimitExhausted) and self.status.error):
                message = e.message if isinstance(e, GHExplorerException) else str(e)
                self.status.show_error(message or DEFAULT_ERROR_MESSAGE)
            raise
        finally:
            self._in_progress = False
            self.status.set_loading(False)
            logger.debug(f"Execution time: {(time.perf_counter() - started) * 1000:.2f} milliseconds")

    async def fetch_repositories(self, language: str) -> RepositoryPage:
        """Deduplicated, retried fetch of the validated page for language"""
        return await self._requests.acquire_or_join(
            self.request_key(language), lambda: self._fetch_and_store(language)
        )

    async def _fetch_and_store(self, language: str) -> RepositoryPage:
        result = await self.retry.execute(lambda: self._attempt(language))
        # A 304 re-puts the cached page with a new timestamp, renewing its TTL
        entry = CacheEntry(
            language=language, data=result.page, etag=result.etag, timestamp=self.cache.now_ms()
        )
        await self.cache.put(language, entry)
        return result.page

    async def _attempt(self, language: str) -> FetchResult:
        cached = await self._revalidation_entry(language)
        response = await self.client.search_repositories(
            self.search_params(language), etag=cached.etag if cached else None
        )
        self.rate_limit.update_from_response_headers(response.headers)

        if response.not_modified and cached is not None:
            logger.info(f"{language} not modified, using cached page")
            return FetchResult(cached.data, response.etag or cached.etag, not_modified=True)

        if not response.ok:
            if self.rate_limit.is_exhausted:
                raise RateLimitExhausted(self.rate_limit.state.reset)
            raise HttpError(response.status)

        page = RepositoryPage.validate_and_filter(response.body, self.settings.min_stars)
        return FetchResult(page, response.etag)

    async def _revalidation_entry(self, language: str) -> CacheEntry | None:
        try:
            return await self.cache.load_persisted(language)
        except StorageError as e:
            logger.warning(f"Cannot read cached {language} for revalidation: {e.message}")
            return self.cache.get(language)

    async def prefetch_repositories(self, language: str) -> bool:
        """
        Warm the cache for language; failures are logged, not raised

        Returns:
            True if the page was fetched (or revalidated)
        """
        owns_loading = not self._in_progress
        if owns_loading:
            self.status.set_loading(True, PREFETCH_MESSAGE)
        try:
            await self.fetch_repositories(language)
            return True
        except Exception as e:
            logger.warning(f"Prefetch failed: {e}")
            return False
        finally:
            if owns_loading and not self._in_progress:
                self.status.set_loading(False)

    async def select_language(self, language: str) -> asyncio.Task | None:
        """
        Switch the current language, prefetching it in the background when
        there is no durable entry or the entry expired

        Returns:
            The background prefetch task, if one was started
        """
        self.status.hide_repository()
        self.current_language = language
        if not language:
            return None

        try:
            entry = await self.cache.load_persisted(language)
        except StorageError as e:
            logger.warning(f"Cannot read cached {language}: {e.message}")
            entry = None

        if entry is None or self.cache.is_expired(entry.timestamp):
            return self.scheduler.spawn(
                self.prefetch_repositories(language), name=f"prefetch-{language}"
            )
        return None

    async def refresh(self) -> Repository | None:
        """Pick another repository for the current language"""
        if not self.current_language:
            return None
        return await self.fetch_random_repository(self.current_language)

    async def check_rate_limit(self) -> RateLimitState:
        return await self.rate_limit.check_explicitly()

    async def check_cache_expiration(self) -> list[str]:
        """Sweep expired entries; refresh the current language if it expired"""
        expired = await self.cache.sweep_expired()
        if self.current_language and self.current_language in expired:
            self.scheduler.spawn(
                self.prefetch_repositories(self.current_language),
                name=f"prefetch-{self.current_language}",
            )
        return expired

    async def handle_visibility_change(self, visible: bool) -> RateLimitState | None:
        if not visible:
            return None
        return await self.check_rate_limit()

    def handle_connectivity_change(self, online: bool) -> None:
        self.status.set_online(online)
        if not online:
            self.status.show_error(OFFLINE_MESSAGE)
        else:
            self.status.hide_error()

    async def aclose(self) -> None:
        """Cancel scheduled work and in-flight calls, then release I/O resources"""
        self._requests.cancel_all()
        self.rate_limit.close()
        self.scheduler.close()
        await self.client.close()
        await self.store.close()


def build_fetcher(settings: FetcherSettings | None = None) -> RepositoryFetcher:
    """Default wiring: SQLite store and aiohttp GitHub client"""
    settings = settings or load_settings()
    store = SQLiteStore(settings.db_path)
    client = GitHubClient(settings.api_base_url, settings.rate_limit_url)
    return RepositoryFetcher(settings, client, store)
