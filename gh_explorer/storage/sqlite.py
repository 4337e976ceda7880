"""
SQLite Store

Durable PersistentStore backed by a single SQLite file.

Each call opens a connection in a worker thread, runs one transaction
(commit on success, rollback on error) and closes the connection, so no
transaction ever spans an await in the caller.
"""

import asyncio
import json
import os
import sqlite3
from collections.abc import Callable
from contextlib import closing
from typing import Any, TypeVar

from ..core.exceptions import StorageError
from ..core.logging_config import get_logger
from ..domain.repositories import ANALYTICS_TABLE, REPOSITORIES_TABLE, PersistentStore, check_table

logger = get_logger(__name__)

T = TypeVar("T")

SCHEMA = (
    f"""
    CREATE TABLE IF NOT EXISTS {REPOSITORIES_TABLE} (
        key TEXT PRIMARY KEY,
        payload TEXT NOT NULL
    )
    """,
    f"""
    CREATE TABLE IF NOT EXISTS {ANALYTICS_TABLE} (
        key INTEGER PRIMARY KEY AUTOINCREMENT,
        payload TEXT NOT NULL
    )
    """,
)


class SQLiteStore(PersistentStore):
    """PersistentStore on SQLite (one table per logical table, JSON payloads)"""

    def __init__(self, db_path: str, timeout: float = 30.0):
        self.db_path = db_path
        self.timeout = timeout
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        if self._initialized:
            return
        directory = os.path.dirname(self.db_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)
        with closing(self._connect()) as conn:
            cur = conn.cursor()
            cur.execute("PRAGMA journal_mode=WAL;")
            for statement in SCHEMA:
                cur.execute(statement)
            conn.commit()
        self._initialized = True

    def _transaction(self, table: str, work: Callable[[sqlite3.Cursor], T]) -> T:
        """Run work inside one transaction; any sqlite error becomes StorageError"""
        try:
            self._ensure_schema()
            with closing(self._connect()) as conn:
                # The connection context manager commits or rolls back
                with conn:
                    return work(conn.cursor())
        except sqlite3.Error as e:
            raise StorageError(f"SQLite {table} transaction failed: {e}", {"table": table}) from e

    async def _run(self, table: str, work: Callable[[sqlite3.Cursor], T]) -> T:
        return await asyncio.to_thread(self._transaction, table, work)

    async def put(self, table: str, record: dict[str, Any]) -> Any:
        key_field = check_table(table)

        if key_field is None:
            record_id = record.get("id")

            def insert(cur: sqlite3.Cursor) -> int:
                payload = {k: v for k, v in record.items() if k != "id"}
                if record_id is None:
                    cur.execute(
                        f"INSERT INTO {table} (payload) VALUES (?)", (json.dumps(payload),)
                    )
                    return cur.lastrowid
                cur.execute(
                    f"INSERT OR REPLACE INTO {table} (key, payload) VALUES (?, ?)",
                    (record_id, json.dumps(payload)),
                )
                return record_id

            return await self._run(table, insert)

        key = record.get(key_field)
        if key is None:
            raise StorageError(f"Record has no {key_field}", {"table": table})

        def upsert(cur: sqlite3.Cursor) -> Any:
            cur.execute(
                f"INSERT OR REPLACE INTO {table} (key, payload) VALUES (?, ?)",
                (key, json.dumps(record)),
            )
            return key

        return await self._run(table, upsert)

    async def get(self, table: str, key: Any) -> dict[str, Any] | None:
        key_field = check_table(table)

        def select(cur: sqlite3.Cursor) -> dict[str, Any] | None:
            cur.execute(f"SELECT key, payload FROM {table} WHERE key = ?", (key,))
            row = cur.fetchone()
            return _decode(row, key_field) if row else None

        return await self._run(table, select)

    async def get_all(self, table: str) -> list[dict[str, Any]]:
        key_field = check_table(table)

        def select_all(cur: sqlite3.Cursor) -> list[dict[str, Any]]:
            cur.execute(f"SELECT key, payload FROM {table} ORDER BY key")
            return [_decode(row, key_field) for row in cur.fetchall()]

        return await self._run(table, select_all)

    async def delete(self, table: str, key: Any) -> bool:
        check_table(table)

        def remove(cur: sqlite3.Cursor) -> bool:
            cur.execute(f"DELETE FROM {table} WHERE key = ?", (key,))
            return cur.rowcount > 0

        return await self._run(table, remove)

    async def delete_many(self, table: str, keys: list[Any]) -> int:
        check_table(table)

        def remove_all(cur: sqlite3.Cursor) -> int:
            deleted = 0
            for key in keys:
                cur.execute(f"DELETE FROM {table} WHERE key = ?", (key,))
                deleted += cur.rowcount
            return deleted

        return await self._run(table, remove_all)


def _decode(row: sqlite3.Row, key_field: str | None) -> dict[str, Any]:
    record = json.loads(row["payload"])
    if key_field is None:
        record["id"] = row["key"]
    return record
