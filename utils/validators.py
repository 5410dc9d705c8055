"""Input validation helpers."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from core.exceptions import ValidationError


DATE_RE = re.compile(r"^(\d{4})[-/](\d{1,2})[-/](\d{1,2})$")


def normalize_name(value: Any) -> str:
    """Return the trimmed holder name.

    Raises:
        ValidationError: If the name is missing or only whitespace.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Name is required", field="name")
    return value.strip()


def normalize_note(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError("Note must be text", field="note")
    return value.strip()


def validate_tickets(value: Any) -> int:
    """Return a ticket count, rejecting negatives and non-integers."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Tickets must be a whole number", field="tickets")
    if value < 0:
        raise ValidationError("Tickets cannot be negative", field="tickets")
    return value


def validate_datetime(value: Any, field: str) -> datetime:
    """Accept a datetime, or a date taken as local midnight."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise ValidationError(f"{field} must be a date", field=field)


def parse_date(value: str) -> datetime:
    """Parse YYYY-MM-DD (or YYYY/MM/DD) as local midnight."""
    match = DATE_RE.match(value.strip()) if value else None
    if not match:
        raise ValidationError(f"Invalid date: {value!r}, expected YYYY-MM-DD", field="date")
    year, month, day = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day)
    except ValueError as e:
        raise ValidationError(f"Invalid date: {value!r} ({e})", field="date") from e
