"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
import locale
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import pytest
import pytest_asyncio

from core.exceptions import StorageError
from database import InMemoryKeyValueStore, SQLiteKeyValueStore, SQLitePool, run_migrations
from database.models import PassRecord
from services import PassStore


NOW = datetime(2024, 3, 15, 10, 30)

COLLATING_LOCALES = ("en_US.UTF-8", "en_US.utf8", "de_DE.UTF-8", "fr_FR.UTF-8", "en_GB.UTF-8")


class FakeClock:
    """Settable clock for deterministic timestamps."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class SlowKeyValueStore(InMemoryKeyValueStore):
    """Yields to the event loop on every access, like a real database."""

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        await asyncio.sleep(0)
        return await super().get(key)

    async def set(self, key: str, value: Dict[str, Any]) -> None:
        await asyncio.sleep(0)
        await super().set(key, value)


class FailingKeyValueStore(InMemoryKeyValueStore):
    """Fails every write or every access, as a broken disk would."""

    def __init__(self, fail_reads: bool = False) -> None:
        super().__init__()
        self.fail_reads = fail_reads

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        if self.fail_reads:
            raise StorageError("disk I/O error", key=key)
        return await super().get(key)

    async def set(self, key: str, value: Dict[str, Any]) -> None:
        raise StorageError("disk I/O error", key=key)

    async def delete(self, key: str) -> bool:
        raise StorageError("disk I/O error", key=key)

    async def keys(self) -> list:
        if self.fail_reads:
            raise StorageError("disk I/O error")
        return await super().keys()


def make_record(
    name: str = "Alice",
    tickets: int = 4,
    expires_at: Any = NOW + timedelta(days=30),
    purchased_at: Any = NOW - timedelta(days=30),
    pass_id: str = "",
) -> PassRecord:
    return PassRecord(
        id=pass_id or f"id-{name}",
        name=name,
        tickets=tickets,
        purchased_at=purchased_at,
        expires_at=expires_at,
        note="",
        updated_at=NOW,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def pass_store(memory_store: InMemoryKeyValueStore, clock: FakeClock) -> PassStore:
    return PassStore(memory_store, clock=clock)


@pytest_asyncio.fixture
async def sqlite_pool(tmp_path):
    """Migrated database in a temporary directory."""
    pool = SQLitePool(database_path=str(tmp_path / "passes.sqlite"), pool_size=2, busy_timeout_ms=1000)
    await pool.init_pool()
    await run_migrations(pool)
    yield pool
    await pool.close()


@pytest.fixture
def sqlite_store(sqlite_pool: SQLitePool) -> SQLiteKeyValueStore:
    return SQLiteKeyValueStore(sqlite_pool)


@pytest.fixture
def collating_locale():
    """Switch LC_COLLATE to a language locale for one test."""
    previous = locale.setlocale(locale.LC_COLLATE)
    for name in COLLATING_LOCALES:
        try:
            locale.setlocale(locale.LC_COLLATE, name)
        except locale.Error:
            continue
        break
    else:
        pytest.skip("no collating locale installed")
    try:
        yield name
    finally:
        locale.setlocale(locale.LC_COLLATE, previous)
