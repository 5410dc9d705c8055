"""Services package."""

from .pass_store import PassStore
from .status_engine import (
    add_calendar_months,
    can_consume,
    classify,
    days_left,
    days_left_text,
    format_date,
    sort_key,
    sort_passes,
    status_of,
)

__all__ = [
    "PassStore",
    "add_calendar_months",
    "can_consume",
    "classify",
    "days_left",
    "days_left_text",
    "format_date",
    "sort_key",
    "sort_passes",
    "status_of",
]
