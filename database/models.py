"""Pass record model and its storage representation."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from core.exceptions import StorageError
from utils.timestamps import parse_timestamp

_DATETIME_FIELDS = ("purchased_at", "expires_at", "updated_at")

# Key names written by the browser version of the tracker
LEGACY_KEYS = {
    "purchased_at": "purchasedAt",
    "expires_at": "expiresAt",
    "updated_at": "updatedAt",
}


def _field(data: Dict[str, Any], name: str) -> Any:
    if name in data:
        return data[name]
    return data.get(LEGACY_KEYS.get(name, name))


def _timestamp(data: Dict[str, Any], name: str, default: Optional[datetime] = None) -> datetime:
    value = _field(data, name)
    if value is None and default is not None:
        return default
    moment = parse_timestamp(value)
    if moment is None:
        raise ValueError(f"{name} is not a timestamp: {value!r}")
    return moment


@dataclass(frozen=True, slots=True)
class PassRecord:
    id: str
    name: str
    tickets: int
    purchased_at: datetime
    expires_at: datetime
    note: str
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready mapping with ISO-8601 timestamps."""
        data = asdict(self)
        for field in _DATETIME_FIELDS:
            data[field] = data[field].isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PassRecord":
        """Build a record from its stored mapping.

        Records exported by the browser version (camelCase keys, epoch
        millisecond timestamps) are read as well; they are written back in
        the current format on their next change.

        Raises:
            StorageError: If the mapping is missing fields or holds bad values.
        """
        if not isinstance(data, dict):
            raise StorageError(f"Malformed pass payload: expected an object, got {type(data).__name__}")
        try:
            if data["id"] is None or data["name"] is None:
                raise ValueError("id and name are required")
            tickets = data["tickets"]
            if isinstance(tickets, bool) or int(tickets) != tickets:
                raise ValueError(f"tickets is not a whole number: {tickets!r}")
            purchased_at = _timestamp(data, "purchased_at")
            return cls(
                id=str(data["id"]),
                name=str(data["name"]),
                tickets=int(tickets),
                purchased_at=purchased_at,
                expires_at=_timestamp(data, "expires_at"),
                note=str(data.get("note") or ""),
                updated_at=_timestamp(data, "updated_at", default=purchased_at),
            )
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise StorageError(f"Malformed pass payload: {e!r}", key=data.get("id")) from e
