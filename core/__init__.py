"""Core application components."""

from core.logger import configure_logging, setup_logger, get_logger
from core.constants import (
    PassDefaults,
    DatabaseDefaults,
    PassStatus,
    StatusLabels,
)
from core.exceptions import (
    ApplicationError,
    ConfigurationError,
    StorageError,
    ValidationError,
    NotFoundError,
)

__all__ = [
    # Logging
    'configure_logging',
    'setup_logger',
    'get_logger',
    # Constants
    'PassDefaults',
    'DatabaseDefaults',
    'PassStatus',
    'StatusLabels',
    # Exceptions
    'ApplicationError',
    'ConfigurationError',
    'StorageError',
    'ValidationError',
    'NotFoundError',
]
