"""Database package public API."""

from .connection import SQLitePool
from .key_value import InMemoryKeyValueStore, KeyValueStore
from .migrations import run_migrations
from .models import PassRecord
from .repositories import SQLiteKeyValueStore

__all__ = [
    "SQLitePool",
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SQLiteKeyValueStore",
    "PassRecord",
    "run_migrations",
]
