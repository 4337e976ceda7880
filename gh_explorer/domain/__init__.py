"""
Domain Layer - Entities and storage contracts

This layer contains:
- Domain models: Repository, RepositoryPage, CacheEntry, RateLimitState, AnalyticsRecord
- Repositories: Abstract interface for the persistent store

Independent of aiohttp, SQLite and FastAPI; testable without I/O.
"""

from .models import (
    AnalyticsAction,
    AnalyticsRecord,
    CacheEntry,
    RateLimitState,
    Repository,
    RepositoryPage,
)
from .repositories import PersistentStore

__all__ = [
    "AnalyticsAction",
    "AnalyticsRecord",
    "CacheEntry",
    "RateLimitState",
    "Repository",
    "RepositoryPage",
    "PersistentStore",
]
