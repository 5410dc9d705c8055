"""Application configuration module.

Reads settings from environment variables (optionally from a ``.env`` file)
with defaults suited to a single local user.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from core.constants import DatabaseDefaults
from core.exceptions import ConfigurationError


def _get_bool(name: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    """Get integer from environment variable with fallback."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_str(name: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.getenv(name, default)


@dataclass(frozen=True)
class Config:
    environment: str
    debug: bool
    database_path: str
    db_pool_size: int
    db_busy_timeout: int
    log_folder: str
    log_level: str

    @property
    def log_file(self) -> str:
        return os.path.join(self.log_folder, "passes.log")


def load_config(env_file: Optional[str] = None) -> Config:
    """Load application configuration from environment variables.

    Args:
        env_file: Optional path of a dotenv file; ``.env`` lookup otherwise

    Returns:
        Config: Application configuration with validated values

    Raises:
        ConfigurationError: If the pool size is not positive or the busy timeout is negative
    """
    load_dotenv(env_file)

    debug = _get_bool("DEBUG", False)
    config = Config(
        environment=_get_str("ENVIRONMENT", "development"),
        debug=debug,
        database_path=_get_str("DATABASE_PATH", DatabaseDefaults.PATH),
        db_pool_size=_get_int("DB_POOL_SIZE", DatabaseDefaults.POOL_SIZE),
        db_busy_timeout=_get_int("DB_BUSY_TIMEOUT", DatabaseDefaults.BUSY_TIMEOUT),
        log_folder=_get_str("LOG_FOLDER", "logs"),
        log_level=_get_str("LOG_LEVEL", "DEBUG" if debug else "INFO"),
    )

    if config.db_pool_size < 1:
        raise ConfigurationError(f"DB_POOL_SIZE must be positive, got {config.db_pool_size}")
    if config.db_busy_timeout < 0:
        raise ConfigurationError(f"DB_BUSY_TIMEOUT must not be negative, got {config.db_busy_timeout}")

    return config
