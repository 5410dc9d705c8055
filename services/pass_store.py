"""Pass store: create, list, use, edit and delete passes.

The store works against an explicitly passed :class:`KeyValueStore`
handle. Mutations of one pass are serialized with a per-id lock, so two
rapid "use" requests can never both see a remaining ticket and both
decrement it.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from core import get_logger, PassDefaults, PassStatus
from core.exceptions import NotFoundError, StorageError, ValidationError
from database.key_value import KeyValueStore
from database.models import PassRecord
from utils.validators import (
    normalize_name,
    normalize_note,
    validate_datetime,
    validate_tickets,
)

from .status_engine import add_calendar_months, classify, sort_passes

logger = get_logger(__name__)

EDITABLE_FIELDS = frozenset({"name", "note", "tickets", "purchased_at", "expires_at"})


class PassStore:
    """Service for pass lifecycle operations."""

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the pass store.

        Args:
            store: Key-value storage handle holding the pass records
            clock: Returns the current local time; replaced in tests
        """
        self._store = store
        self._clock = clock
        self._locks: Dict[str, asyncio.Lock] = {}
        self._locks_lock = asyncio.Lock()

    async def _get_key_lock(self, pass_id: str) -> asyncio.Lock:
        """Get or create the lock guarding one pass."""
        async with self._locks_lock:
            if pass_id not in self._locks:
                self._locks[pass_id] = asyncio.Lock()
            return self._locks[pass_id]

    async def _load(self, pass_id: str) -> Optional[PassRecord]:
        try:
            data = await self._store.get(pass_id)
            if data is None:
                return None
            return PassRecord.from_dict(data)
        except StorageError as e:
            logger.error(f"Failed to load pass {pass_id}: {e}")
            raise

    async def _save(self, record: PassRecord) -> None:
        try:
            await self._store.set(record.id, record.to_dict())
        except StorageError as e:
            logger.error(f"Failed to save pass {record.id}: {e}")
            raise

    async def create(
        self,
        name: str,
        note: str = "",
        purchased_at: Optional[datetime] = None,
    ) -> PassRecord:
        """Create a new pass with a full set of tickets.

        Raises:
            ValidationError: If the name is empty after trimming.
            StorageError: If the pass cannot be persisted.
        """
        clean_name = normalize_name(name)
        clean_note = normalize_note(note)
        now = self._clock()
        purchased = validate_datetime(purchased_at, "purchased_at") if purchased_at is not None else now

        record = PassRecord(
            id=str(uuid.uuid4()),
            name=clean_name,
            tickets=PassDefaults.TICKETS,
            purchased_at=purchased,
            expires_at=add_calendar_months(purchased, PassDefaults.VALIDITY_MONTHS),
            note=clean_note,
            updated_at=now,
        )
        await self._save(record)
        logger.info(f"Created pass {record.id} for {record.name}")
        return record

    async def list_all(self) -> List[PassRecord]:
        """Return every stored pass, in no particular order.

        A row that cannot be decoded is skipped with a warning so one bad
        record does not hide the rest of the roster; ``get_by_id`` still
        raises ``StorageError`` for it.
        """
        try:
            pairs = await self._store.items()
        except StorageError as e:
            logger.error(f"Failed to list passes: {e}")
            raise

        records = []
        for pass_id, data in pairs:
            try:
                records.append(PassRecord.from_dict(data))
            except StorageError as e:
                logger.warning(f"Skipping unreadable pass {pass_id}: {e}")
        return records

    async def list_sorted(self, now: Optional[datetime] = None) -> List[PassRecord]:
        """Return every stored pass in listing order."""
        records = await self.list_all()
        return sort_passes(records, now if now is not None else self._clock())

    async def get_by_id(self, pass_id: str) -> Optional[PassRecord]:
        """Return a pass, or None when it does not exist."""
        return await self._load(pass_id)

    async def consume_use(self, pass_id: str) -> PassRecord:
        """Use one ticket of a pass.

        An exhausted or expired pass is returned unchanged; callers compare
        the returned ticket count to tell whether a ticket was used.

        Raises:
            NotFoundError: If the pass does not exist.
        """
        lock = await self._get_key_lock(pass_id)
        async with lock:
            record = await self._load(pass_id)
            if record is None:
                logger.warning(f"Pass {pass_id} not found")
                raise NotFoundError(pass_id)

            now = self._clock()
            status = classify(record.tickets, record.expires_at, now)
            if status is PassStatus.EXHAUSTED:
                logger.warning(f"Pass {pass_id} ({record.name}) has no tickets left")
                return record
            if status is PassStatus.EXPIRED:
                logger.warning(f"Pass {pass_id} ({record.name}) has expired")
                return record

            updated = replace(record, tickets=record.tickets - 1, updated_at=now)
            await self._save(updated)
            logger.info(f"Used a ticket of pass {pass_id}, {updated.tickets} left")
            return updated

    async def update(self, pass_id: str, fields: Mapping[str, Any]) -> PassRecord:
        """Merge edited fields into a pass.

        Changing ``purchased_at`` recomputes ``expires_at``.

        Raises:
            ValidationError: If a field is not editable or holds a bad value.
            NotFoundError: If the pass does not exist.
        """
        changes = self._validate_changes(fields)

        lock = await self._get_key_lock(pass_id)
        async with lock:
            record = await self._load(pass_id)
            if record is None:
                logger.warning(f"Pass {pass_id} not found for update")
                raise NotFoundError(pass_id)

            purchased = changes.get("purchased_at")
            if purchased is not None and purchased != record.purchased_at:
                changes["expires_at"] = add_calendar_months(purchased, PassDefaults.VALIDITY_MONTHS)

            updated = replace(record, **changes, updated_at=self._clock())
            await self._save(updated)
            logger.info(f"Updated pass {pass_id}: {', '.join(sorted(fields)) or 'no fields'}")
            return updated

    @staticmethod
    def _validate_changes(fields: Mapping[str, Any]) -> Dict[str, Any]:
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            field = sorted(unknown)[0]
            raise ValidationError(f"Field cannot be edited: {field}", field=field)

        changes: Dict[str, Any] = {}
        if "name" in fields:
            changes["name"] = normalize_name(fields["name"])
        if "note" in fields:
            changes["note"] = normalize_note(fields["note"])
        if "tickets" in fields:
            changes["tickets"] = validate_tickets(fields["tickets"])
        for field in ("purchased_at", "expires_at"):
            if field in fields:
                changes[field] = validate_datetime(fields[field], field)
        return changes

    async def delete(self, pass_id: str) -> bool:
        """Delete a pass. Deleting a missing pass is not an error."""
        lock = await self._get_key_lock(pass_id)
        async with lock:
            try:
                removed = await self._store.delete(pass_id)
            except StorageError as e:
                logger.error(f"Failed to delete pass {pass_id}: {e}")
                raise
        if removed:
            logger.info(f"Deleted pass {pass_id}")
        else:
            logger.debug(f"Pass {pass_id} already absent")
        return removed

    async def clear_all(self) -> int:
        """Delete every pass and return how many were removed."""
        removed = 0
        for pass_id in await self._store.keys():
            if await self.delete(pass_id):
                removed += 1
        logger.info(f"Cleared {removed} pass(es)")
        return removed
