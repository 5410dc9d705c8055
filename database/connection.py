"""Small aiosqlite connection pool for the local pass database."""

from __future__ import annotations

import asyncio
import sqlite3
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from core.constants import DatabaseDefaults
from core.exceptions import StorageError
from core.logger import get_logger

logger = get_logger(__name__)


@dataclass
class _PooledConnection:
    conn: aiosqlite.Connection
    in_use: bool = False


class SQLitePool:
    """Fixed-size pool of aiosqlite connections to one database file.

    The pool is an explicit handle: callers create it, pass it to the
    stores that need it, and close it when done.
    """

    def __init__(
        self,
        database_path: str,
        pool_size: int = DatabaseDefaults.POOL_SIZE,
        busy_timeout_ms: int = DatabaseDefaults.BUSY_TIMEOUT,
    ) -> None:
        self.database_path = Path(database_path)
        self.pool_size = pool_size
        self.busy_timeout_ms = busy_timeout_ms
        self._connections: deque[_PooledConnection] = deque()
        self._available = asyncio.Condition()
        self._init_lock = asyncio.Lock()
        self._initialized = False

    async def init_pool(self) -> None:
        if self._initialized:
            return

        async with self._init_lock:
            # Another caller may have opened the pool while we waited
            if self._initialized:
                return

            try:
                if not self.database_path.parent.exists():
                    self.database_path.parent.mkdir(parents=True, exist_ok=True)

                for _ in range(self.pool_size):
                    conn = await aiosqlite.connect(self.database_path.as_posix())
                    await self._apply_pragma(conn)
                    self._connections.append(_PooledConnection(conn=conn))
            except (sqlite3.Error, OSError) as e:
                await self.close()
                raise StorageError(f"Cannot open database {self.database_path}: {e}") from e

            self._initialized = True
        logger.debug(f"Opened {self.pool_size} connection(s) to {self.database_path}")

    async def close(self) -> None:
        while self._connections:
            pooled = self._connections.popleft()
            await pooled.conn.close()
        self._initialized = False

    async def _apply_pragma(self, conn: aiosqlite.Connection) -> None:
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA synchronous=NORMAL")
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout_ms}")

    async def _acquire(self) -> aiosqlite.Connection:
        async with self._available:
            while True:
                for pooled in self._connections:
                    if not pooled.in_use:
                        pooled.in_use = True
                        return pooled.conn
                await self._available.wait()

    async def _release(self, conn: aiosqlite.Connection) -> None:
        async with self._available:
            for pooled in self._connections:
                if pooled.conn is conn:
                    pooled.in_use = False
                    self._available.notify()
                    return

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        if not self._initialized:
            await self.init_pool()
        conn = await self._acquire()
        try:
            yield conn
        finally:
            await self._release(conn)

    async def __aenter__(self) -> "SQLitePool":
        await self.init_pool()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
