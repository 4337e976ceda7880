"""
Cache Service - two-tier repository page cache

This service handles:
- Bounded memory cache per language (oldest-inserted entry evicted first)
- Write-through to the persistent store's repositories table
- TTL expiration checks and the expired-entry sweep
- Persistent lookups for revalidation tokens and language warm-up
"""

import time
from collections.abc import Callable
from typing import Any

from ..core.exceptions import StorageError
from ..core.logging_config import get_logger, log_with_context
from ..domain.models import AnalyticsAction, CacheEntry
from ..domain.repositories import REPOSITORIES_TABLE, PersistentStore
from .analytics_service import AnalyticsService

logger = get_logger(__name__)


class CacheManager:
    """Owner of the memory cache and of every write to the repositories table"""

    def __init__(
        self,
        store: PersistentStore,
        analytics: AnalyticsService,
        max_size: int,
        cache_duration_ms: int,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize cache manager

        Args:
            store: Persistent store (durable tier)
            analytics: Analytics sink for cache_update / cache_cleanup records
            max_size: Maximum number of languages kept in memory
            cache_duration_ms: TTL of an entry in milliseconds
            clock: Wall clock in epoch seconds
        """
        self.store = store
        self._analytics = analytics
        self.max_size = max_size
        self.cache_duration_ms = cache_duration_ms
        self._clock = clock
        # dict keeps insertion order; re-putting a key keeps its position
        self._memory: dict[str, CacheEntry] = {}

    @property
    def size(self) -> int:
        return len(self._memory)

    def languages(self) -> list[str]:
        """Cached languages, oldest insertion first"""
        return list(self._memory)

    def now_ms(self) -> int:
        return int(self._clock() * 1000)

    def get(self, language: str) -> CacheEntry | None:
        """Memory lookup only"""
        return self._memory.get(language)

    async def load_persisted(self, language: str) -> CacheEntry | None:
        """
        Read the durable entry for a language

        Raises:
            StorageError: If the store read fails
        """
        record = await self.store.get(REPOSITORIES_TABLE, language)
        return CacheEntry.from_record(record) if record else None

    async def put(self, language: str, entry: CacheEntry) -> None:
        """
        Write an entry through both tiers

        Memory is updated first, then the store. The write counts as done
        only once the store accepted it.

        Raises:
            StorageError: If the durable write fails
        """
        self._memory[language] = entry
        try:
            await self.store.put(REPOSITORIES_TABLE, entry.to_record())
        finally:
            self._evict_overflow()

        await self._analytics.record(
            AnalyticsAction.CACHE_UPDATE, language=language, cacheSize=len(self._memory)
        )

    def _evict_overflow(self) -> None:
        while len(self._memory) > self.max_size:
            oldest = next(iter(self._memory))
            del self._memory[oldest]
            logger.debug(f"Evicted {oldest} from memory cache")

    def evict(self, language: str) -> bool:
        """Drop a language from memory (the durable copy is untouched)"""
        return self._memory.pop(language, None) is not None

    def is_expired(self, timestamp: int, ttl: int | None = None) -> bool:
        """True once more than ttl ms have passed since timestamp"""
        ttl = self.cache_duration_ms if ttl is None else ttl
        return self.now_ms() - timestamp > ttl

    def is_fresh(self, entry: CacheEntry) -> bool:
        """True while the entry is younger than the cache duration"""
        return entry.age_ms(self.now_ms()) < self.cache_duration_ms

    async def sweep_expired(self) -> list[str]:
        """
        Remove expired entries from both tiers

        Best effort: store failures are logged, never raised.

        Returns:
            Languages whose entries expired
        """
        try:
            records = await self.store.get_all(REPOSITORIES_TABLE)
        except StorageError as e:
            logger.warning(f"Failed to check cache expiration: {e.message}")
            return []

        expired = []
        for record in records:
            language = record.get("language")
            if language is None:
                continue
            if self.is_expired(int(record.get("timestamp") or 0)):
                expired.append(language)
                self._memory.pop(language, None)

        if not expired:
            return []

        for language in expired:
            try:
                await self.store.delete(REPOSITORIES_TABLE, language)
            except StorageError as e:
                logger.warning(f"Failed to delete expired cache for {language}: {e.message}")

        await self._analytics.record(
            AnalyticsAction.CACHE_CLEANUP, expiredEntries=len(expired), languages=expired
        )
        log_with_context(
            logger, "info", "Expired cache entries removed", languages=expired, count=len(expired)
        )
        return expired

    def stats(self) -> dict[str, Any]:
        """
        Get cache statistics

        Returns:
            Dictionary with size, capacity, ttl and per-language ages
        """
        now = self.now_ms()
        return {
            "size": len(self._memory),
            "max_size": self.max_size,
            "ttl_ms": self.cache_duration_ms,
            "languages": [
                {
                    "language": language,
                    "age_ms": entry.age_ms(now),
                    "items": len(entry.data),
                    "etag": entry.etag,
                    "fresh": self.is_fresh(entry),
                }
                for language, entry in self._memory.items()
            ],
        }
