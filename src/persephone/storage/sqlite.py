"""
SQLite adapter
Async/await raw store using aiosqlite for non-blocking database access.

A single two-column table holds every key, ledger records included.
"""

import logging
import re
import sqlite3
from pathlib import Path
from typing import List, Optional, Union

import aiosqlite

from .base import StorageAdapter, StorageError

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SQLiteAdapter(StorageAdapter):
    """
    SQLite-backed raw store

    Pattern: One row per key, lazily opened connection
    Lifetime: Until close(); the database file persists

    Features:
    - WAL mode for concurrent readers
    - Upsert writes
    - ":memory:" databases for throwaway stores
    """

    def __init__(self, db_path: Union[str, Path], table: str = "kv_store",
                 enable_wal: bool = True):
        """
        Initialize SQLite adapter.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
            table: Table name (letters, digits, underscores)
            enable_wal: Enable WAL mode (default: True)
        """
        if not _IDENTIFIER.match(table):
            raise ValueError(f"Invalid table name: {table!r}")

        self.db_path = db_path if db_path == ":memory:" else Path(db_path)
        self.table = table
        self._enable_wal = enable_wal
        self._conn: Optional[aiosqlite.Connection] = None

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        if self._conn is None:
            if isinstance(self.db_path, Path):
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = await aiosqlite.connect(self.db_path, timeout=30.0)
            await self._init_db()
        return self._conn

    async def _init_db(self) -> None:
        """Create the key-value table."""
        conn = self._conn

        if self._enable_wal and self.db_path != ":memory:":
            await conn.execute("PRAGMA journal_mode=WAL")

        await conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        await conn.commit()
        logger.debug(f"Opened SQLite store {self.db_path} (table {self.table})")

    async def get_item(self, key: str) -> Optional[str]:
        try:
            conn = await self._get_connection()
            async with conn.execute(
                f"SELECT value FROM {self.table} WHERE key = ?", (key,)
            ) as cursor:
                row = await cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(str(e), key, "get_item", e) from e
        return row[0] if row else None

    async def set_item(self, key: str, value: str) -> None:
        try:
            conn = await self._get_connection()
            await conn.execute(
                f"""
                INSERT INTO {self.table} (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )
            await conn.commit()
        except sqlite3.Error as e:
            raise StorageError(str(e), key, "set_item", e) from e

    async def remove_item(self, key: str) -> None:
        try:
            conn = await self._get_connection()
            await conn.execute(f"DELETE FROM {self.table} WHERE key = ?", (key,))
            await conn.commit()
        except sqlite3.Error as e:
            raise StorageError(str(e), key, "remove_item", e) from e

    async def clear(self) -> None:
        try:
            conn = await self._get_connection()
            await conn.execute(f"DELETE FROM {self.table}")
            await conn.commit()
        except sqlite3.Error as e:
            raise StorageError(str(e), None, "clear", e) from e

    async def keys(self) -> List[str]:
        try:
            conn = await self._get_connection()
            async with conn.execute(f"SELECT key FROM {self.table} ORDER BY key") as cursor:
                rows = await cursor.fetchall()
        except sqlite3.Error as e:
            raise StorageError(str(e), None, "keys", e) from e
        return [row[0] for row in rows]

    async def length(self) -> int:
        try:
            conn = await self._get_connection()
            async with conn.execute(f"SELECT COUNT(*) FROM {self.table}") as cursor:
                row = await cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(str(e), None, "length", e) from e
        return row[0]

    async def close(self) -> None:
        """Close connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def __repr__(self) -> str:
        return f"<SQLiteAdapter {self.db_path}:{self.table}>"
