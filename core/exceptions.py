"""Application-wide exception classes."""

from __future__ import annotations

from typing import Optional


class ApplicationError(Exception):
    """Base exception for all application errors."""
    pass


class ConfigurationError(ApplicationError):
    """Raised when configuration is invalid."""
    pass


class StorageError(ApplicationError):
    """Raised when the key-value store cannot complete an operation.

    Covers I/O failures of the underlying database as well as stored
    payloads that can no longer be decoded into a pass record.
    """

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


class ValidationError(ApplicationError):
    """Raised when data validation fails."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(ApplicationError):
    """Raised when an operation targets a pass that does not exist."""

    def __init__(self, pass_id: str) -> None:
        super().__init__(f"Pass not found: {pass_id}")
        self.pass_id = pass_id
