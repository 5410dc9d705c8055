"""Timestamp parsing shared by stored records and status computation."""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Optional


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Read a timestamp as a naive local datetime, or None.

    Accepts ``datetime``/``date`` objects, ISO-8601 strings and epoch
    milliseconds, the format written by the browser version of the tracker.
    Aware datetimes are converted to local time.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value
        try:
            return value.astimezone().replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            return parse_timestamp(datetime.fromisoformat(value.strip()))
        except ValueError:
            return None
    return None
