"""
Services layer - fetch orchestration

This module contains the service classes that implement the client-side
fetch layer, separated from the API and CLI for testability.
"""

from .analytics_service import AnalyticsService
from .cache_service import CacheManager
from .fetch_service import RepositoryFetcher, build_fetcher
from .rate_limit_service import RateLimitService
from .request_dedup import RequestDeduplicator
from .retry_executor import RetryExecutor
from .status_service import StatusBoard

__all__ = [
    "AnalyticsService",
    "CacheManager",
    "RateLimitService",
    "RepositoryFetcher",
    "RequestDeduplicator",
    "RetryExecutor",
    "StatusBoard",
    "build_fetcher",
]
