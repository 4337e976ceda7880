"""
Domain Models - Core entities

This module contains the main entities:
- Repository / RepositoryPage: Search results as consumed by the explorer
- CacheEntry: Cached page per language with its revalidation token
- RateLimitState: Remote quota snapshot
- AnalyticsRecord: Write-only telemetry row
"""

from .analytics import AnalyticsAction, AnalyticsRecord
from .cache_entry import CacheEntry
from .rate_limit import RateLimitState
from .repository import Repository, RepositoryPage, is_valid_item

__all__ = [
    "AnalyticsAction",
    "AnalyticsRecord",
    "CacheEntry",
    "RateLimitState",
    "Repository",
    "RepositoryPage",
    "is_valid_item",
]
