"""Database schema migrations."""

from __future__ import annotations

import sqlite3

from core.exceptions import StorageError
from core.logger import get_logger

from .connection import SQLitePool

logger = get_logger(__name__)


SCHEMA_SQL: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS passes (
        id TEXT PRIMARY KEY,
        payload TEXT NOT NULL,
        updated_at TEXT
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_passes_updated_at ON passes(updated_at);",
)


async def run_migrations(pool: SQLitePool) -> None:
    """Create the pass table if it does not exist yet."""
    try:
        async with pool.connection() as conn:
            await conn.execute("BEGIN")
            try:
                for statement in SCHEMA_SQL:
                    await conn.execute(statement)
            except Exception:
                await conn.rollback()
                raise
            else:
                await conn.commit()
    except sqlite3.Error as e:
        raise StorageError(f"Schema migration failed: {e}") from e
    logger.debug("Schema is up to date")
