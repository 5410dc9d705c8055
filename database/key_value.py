"""Key-value storage interface (repository pattern).

Stores must be swappable: the pass store only needs get/set/delete and
a listing of keys, so tests can run against an in-memory double.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple


class KeyValueStore(ABC):
    """Interface for a durable collection of JSON-ready values keyed by id."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the value stored under key, or None."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Dict[str, Any]) -> None:
        """Insert or replace the value stored under key."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove key; return whether anything was removed."""
        ...

    @abstractmethod
    async def keys(self) -> List[str]:
        """Return every stored key."""
        ...

    async def items(self) -> List[Tuple[str, Dict[str, Any]]]:
        """Return every (key, value) pair."""
        pairs = []
        for key in await self.keys():
            value = await self.get(key)
            if value is not None:
                pairs.append((key, value))
        return pairs


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. Values are copied in and out like a real database."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def set(self, key: str, value: Dict[str, Any]) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def keys(self) -> List[str]:
        return list(self._data)

    def __len__(self) -> int:
        return len(self._data)
