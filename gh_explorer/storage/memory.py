"""
Memory Store

In-memory PersistentStore for development and testing.
Data is lost when the process exits.
"""

import copy
from typing import Any

from ..core.exceptions import StorageError
from ..domain.repositories import PersistentStore, check_table


class MemoryStore(PersistentStore):
    """
    In-memory persistent store.

    Records are deep-copied in and out so callers never share mutable
    state with the store, matching what a real engine would do.
    """

    def __init__(self):
        self._tables: dict[str, dict[Any, dict[str, Any]]] = {}
        self._next_id: dict[str, int] = {}
        self._closed = False

    def _table(self, table: str) -> dict[Any, dict[str, Any]]:
        if self._closed:
            raise StorageError("Store is closed", {"table": table})
        check_table(table)
        return self._tables.setdefault(table, {})

    async def put(self, table: str, record: dict[str, Any]) -> Any:
        rows = self._table(table)
        key_field = check_table(table)
        record = copy.deepcopy(record)

        if key_field is None:
            key = record.get("id")
            if key is None:
                key = self._next_id.get(table, 1)
                record["id"] = key
            self._next_id[table] = max(self._next_id.get(table, 1), key + 1)
        else:
            key = record.get(key_field)
            if key is None:
                raise StorageError(f"Record has no {key_field}", {"table": table})

        rows[key] = record
        return key

    async def get(self, table: str, key: Any) -> dict[str, Any] | None:
        record = self._table(table).get(key)
        return copy.deepcopy(record) if record is not None else None

    async def get_all(self, table: str) -> list[dict[str, Any]]:
        rows = self._table(table)
        return [copy.deepcopy(rows[key]) for key in sorted(rows)]

    async def delete(self, table: str, key: Any) -> bool:
        return self._table(table).pop(key, None) is not None

    async def close(self) -> None:
        self._closed = True
