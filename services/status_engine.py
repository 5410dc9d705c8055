"""Derived pass status: days left, classification and listing order.

Everything here is pure and never raises on malformed input. Timestamps
may be ``datetime``/``date`` objects, ISO-8601 strings or epoch
milliseconds (the format of older exports). Anything that cannot be read
as a date yields ``None`` from :func:`days_left` and
``PassStatus.UNKNOWN`` from :func:`classify`.
"""

from __future__ import annotations

import calendar
import locale
import math
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Tuple, TypeVar

from core.constants import PassDefaults, PassStatus, StatusLabels
from utils.timestamps import parse_timestamp

Instant = TypeVar("Instant", date, datetime)


def _as_tickets(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def add_calendar_months(instant: Instant, months: int) -> Instant:
    """Add calendar months, clamping the day to the end of the target month.

    Time of day is kept. Jan 31 + 1 month is Feb 28 (29 in leap years),
    not Mar 3.
    """
    month_index = instant.month - 1 + months
    year = instant.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return instant.replace(year=year, month=month, day=min(instant.day, last_day))


def days_left(expires_at: Any, now: Any = None) -> Optional[int]:
    """Whole days from today until the expiry date.

    Both instants are truncated to local midnight first, so the time of day
    never matters: 0 means the pass expires today, negative means it has
    already expired.
    """
    expires = parse_timestamp(expires_at)
    current = parse_timestamp(now if now is not None else datetime.now())
    if expires is None or current is None:
        return None
    return (expires.date() - current.date()).days


def classify(tickets: Any, expires_at: Any, now: Any = None) -> PassStatus:
    """Classify a pass. Exhaustion takes priority over expiry."""
    count = _as_tickets(tickets)
    if count is None:
        return PassStatus.UNKNOWN
    if count <= 0:
        return PassStatus.EXHAUSTED

    remaining = days_left(expires_at, now)
    if remaining is None:
        return PassStatus.UNKNOWN
    if remaining < 0:
        return PassStatus.EXPIRED
    if remaining < PassDefaults.EXPIRING_SOON_DAYS:
        return PassStatus.EXPIRING_SOON
    return PassStatus.ACTIVE


def status_of(record: Any, now: Any = None) -> PassStatus:
    """Classify a pass record (or anything with the same attributes)."""
    return classify(
        getattr(record, "tickets", None),
        getattr(record, "expires_at", None),
        now,
    )


def can_consume(record: Any, now: Any = None) -> bool:
    """Whether the "use one ticket" action should be enabled."""
    return status_of(record, now) in (PassStatus.ACTIVE, PassStatus.EXPIRING_SOON)


def _name_key(name: Any) -> str:
    text = name if isinstance(name, str) else ""
    try:
        return locale.strxfrm(text.casefold())
    except (OSError, ValueError):
        return text.casefold()


def _descending(value: Any) -> float:
    moment = parse_timestamp(value)
    if moment is None:
        return math.inf
    try:
        return -moment.timestamp()
    except (OverflowError, OSError, ValueError):
        return math.inf


def sort_key(record: Any, now: Any = None) -> Tuple[int, float, str, str]:
    """Listing order for a pass.

    Usable passes come first, soonest expiry first. Then time-expired passes
    that still hold tickets, most recently expired first, then exhausted
    passes, most recently purchased first. Unreadable records go last.
    Ties are broken by name.
    """
    name = getattr(record, "name", "")
    tiebreak = (_name_key(name), name if isinstance(name, str) else "")
    status = status_of(record, now)

    if status in (PassStatus.ACTIVE, PassStatus.EXPIRING_SOON):
        return (0, float(days_left(record.expires_at, now)), *tiebreak)
    if status is PassStatus.EXPIRED:
        return (1, _descending(record.expires_at), *tiebreak)
    if status is PassStatus.EXHAUSTED:
        return (2, _descending(getattr(record, "purchased_at", None)), *tiebreak)
    return (3, 0.0, *tiebreak)


def sort_passes(records: Iterable[Any], now: Any = None) -> List[Any]:
    """Return records in listing order."""
    current = now if now is not None else datetime.now()
    return sorted(records, key=lambda record: sort_key(record, current))


def days_left_text(record: Any, now: Any = None) -> str:
    """Short label describing the remaining validity of a pass."""
    status = status_of(record, now)
    if status is PassStatus.UNKNOWN:
        return StatusLabels.NO_DATA
    if status is PassStatus.EXHAUSTED:
        return StatusLabels.EXHAUSTED
    if status is PassStatus.EXPIRED:
        return StatusLabels.EXPIRED

    remaining = days_left(record.expires_at, now)
    if remaining == 0:
        return StatusLabels.TODAY
    return StatusLabels.DAYS_LEFT.format(days=remaining)


def format_date(value: Any) -> str:
    """Format a timestamp as YYYY/MM/DD; empty string when unreadable."""
    moment = parse_timestamp(value)
    if moment is None:
        return ""
    return moment.strftime(StatusLabels.DATE_FORMAT)
