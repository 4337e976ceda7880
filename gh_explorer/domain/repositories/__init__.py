"""
Repository Interfaces - Abstract data access contracts

- PersistentStore: Interface for the durable key-value store

Infrastructure (gh_explorer.storage) implements these contracts so the
services stay independent of the storage engine.
"""

from .persistent_store import (
    ANALYTICS_TABLE,
    REPOSITORIES_TABLE,
    TABLE_KEYS,
    PersistentStore,
    check_table,
)

__all__ = [
    "ANALYTICS_TABLE",
    "REPOSITORIES_TABLE",
    "TABLE_KEYS",
    "PersistentStore",
    "check_table",
]
