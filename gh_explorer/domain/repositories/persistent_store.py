"""
PersistentStore Interface

Abstract key-value store with two logical tables, following the Repository Pattern:
- repositories: keyed by the record's "language" field
- analytics: append-only, auto-keyed ("id" assigned by the store)

Every call runs in its own transaction: it either commits fully or raises
StorageError and leaves the table unchanged.
"""

from abc import ABC, abstractmethod
from typing import Any

REPOSITORIES_TABLE = "repositories"
ANALYTICS_TABLE = "analytics"

# Key field per table; None means the store assigns an integer "id"
TABLE_KEYS: dict[str, str | None] = {
    REPOSITORIES_TABLE: "language",
    ANALYTICS_TABLE: None,
}


class PersistentStore(ABC):
    """
    Abstract repository interface for durable storage.

    Implementations can use SQLite, a browser-like object store, or plain memory.
    """

    @abstractmethod
    async def put(self, table: str, record: dict[str, Any]) -> Any:
        """
        Insert or replace a record.

        Args:
            table: Table name
            record: Record to store (must be JSON-serialisable)

        Returns:
            The record's key

        Raises:
            StorageError: If the transaction fails
        """
        pass

    @abstractmethod
    async def get(self, table: str, key: Any) -> dict[str, Any] | None:
        """
        Retrieve a record by key.

        Returns:
            The record if found, None otherwise

        Raises:
            StorageError: If the transaction fails
        """
        pass

    @abstractmethod
    async def get_all(self, table: str) -> list[dict[str, Any]]:
        """
        Retrieve every record of a table in key order.

        Raises:
            StorageError: If the transaction fails
        """
        pass

    @abstractmethod
    async def delete(self, table: str, key: Any) -> bool:
        """
        Delete a record by key.

        Returns:
            True if the record existed and was deleted, False otherwise

        Raises:
            StorageError: If the transaction fails
        """
        pass

    async def close(self) -> None:
        """Release backend resources (no-op by default)"""
        return None

    async def delete_many(self, table: str, keys: list[Any]) -> int:
        """
        Delete multiple records.

        Default implementation using delete primitives.
        Subclasses can override for a single-transaction batch.

        Returns:
            Number of records actually deleted
        """
        deleted = 0
        for key in keys:
            if await self.delete(table, key):
                deleted += 1
        return deleted


def check_table(table: str) -> str | None:
    """Return the key field for table, rejecting unknown tables"""
    if table not in TABLE_KEYS:
        raise ValueError(f"Unknown table: {table}")
    return TABLE_KEYS[table]
