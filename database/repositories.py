"""SQLite implementation of the key-value store."""

from __future__ import annotations

import json
import sqlite3
from typing import Any, Dict, List, Optional, Sequence, Tuple

from core.constants import DatabaseDefaults
from core.exceptions import StorageError
from core.logger import get_logger

from .connection import SQLitePool
from .key_value import KeyValueStore

logger = get_logger(__name__)


class SQLiteKeyValueStore(KeyValueStore):
    """Stores each value as a JSON payload in one row of the passes table."""

    def __init__(self, pool: SQLitePool, table: str = DatabaseDefaults.TABLE) -> None:
        self._pool = pool
        self._table = table

    async def _execute(self, query: str, params: Sequence[Any] = ()) -> int:
        """Execute a write and return the number of affected rows."""
        try:
            async with self._pool.connection() as conn:
                cursor = await conn.execute(query, params)
                await conn.commit()
                return cursor.rowcount
        except sqlite3.Error as e:
            raise StorageError(f"Write to {self._table} failed: {e}") from e

    async def _fetch_one(self, query: str, params: Sequence[Any] = ()) -> Optional[Tuple]:
        try:
            async with self._pool.connection() as conn:
                cursor = await conn.execute(query, params)
                return await cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Read from {self._table} failed: {e}") from e

    async def _fetch_all(self, query: str, params: Sequence[Any] = ()) -> List[Tuple]:
        try:
            async with self._pool.connection() as conn:
                cursor = await conn.execute(query, params)
                return [row async for row in cursor]
        except sqlite3.Error as e:
            raise StorageError(f"Read from {self._table} failed: {e}") from e

    @staticmethod
    def _decode(key: str, payload: str) -> Dict[str, Any]:
        try:
            return json.loads(payload)
        except ValueError as e:
            raise StorageError(f"Corrupt payload for {key}: {e}", key=key) from e

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        row = await self._fetch_one(f"SELECT payload FROM {self._table} WHERE id=?", (key,))
        if row is None:
            return None
        return self._decode(key, row[0])

    async def set(self, key: str, value: Dict[str, Any]) -> None:
        await self._execute(
            f"""INSERT INTO {self._table} (id, payload, updated_at)
               VALUES (?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                   payload=excluded.payload,
                   updated_at=excluded.updated_at
            """,
            (key, json.dumps(value, ensure_ascii=False), value.get("updated_at")),
        )

    async def delete(self, key: str) -> bool:
        removed = await self._execute(f"DELETE FROM {self._table} WHERE id=?", (key,))
        return removed > 0

    async def keys(self) -> List[str]:
        rows = await self._fetch_all(f"SELECT id FROM {self._table}")
        return [row[0] for row in rows]

    async def items(self) -> List[Tuple[str, Dict[str, Any]]]:
        rows = await self._fetch_all(f"SELECT id, payload FROM {self._table}")
        pairs = []
        for key, payload in rows:
            try:
                pairs.append((key, self._decode(key, payload)))
            except StorageError as e:
                logger.warning(f"Skipping row: {e}")
        return pairs
