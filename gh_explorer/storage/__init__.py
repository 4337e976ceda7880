"""
Storage backends implementing gh_explorer.domain.repositories.PersistentStore

- MemoryStore: process-local, for tests and ephemeral runs
- SQLiteStore: durable single-file store
"""

from .memory import MemoryStore
from .sqlite import SQLiteStore

__all__ = [
    "MemoryStore",
    "SQLiteStore",
]
