"""Application-wide constants and configuration values."""

from __future__ import annotations

from enum import Enum


# Pass rules
class PassDefaults:
    """Quantity and validity window of a newly sold pass."""
    TICKETS = 4
    VALIDITY_MONTHS = 2
    EXPIRING_SOON_DAYS = 7


# Database constants
class DatabaseDefaults:
    """Default database configuration."""
    PATH = "data/passes.sqlite"
    POOL_SIZE = 4
    BUSY_TIMEOUT = 5000  # milliseconds
    TABLE = "passes"


# Status enums
class PassStatus(str, Enum):
    """Derived pass status, computed at read time and never stored."""
    ACTIVE = "active"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"
    UNKNOWN = "unknown"


# Display labels
class StatusLabels:
    """Short labels shown next to a pass."""
    NO_DATA = "情報なし"
    EXHAUSTED = "利用終了"
    EXPIRED = "期限切れ"
    TODAY = "本日まで"
    DAYS_LEFT = "あと{days}日"
    DATE_FORMAT = "%Y/%m/%d"
