"""Logging setup for the pass tracker.

Diagnostics go to stderr so command output on stdout stays clean, and the
optional log file always receives plain, uncolored lines.
"""

from __future__ import annotations

import copy
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from config import Config

LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
FILE_LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Library loggers that log every statement at DEBUG
QUIET_LOGGERS = ("aiosqlite", "asyncio")


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name for terminal output."""

    COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # The file handler formats the same record object
        shown = copy.copy(record)
        color = self.COLORS.get(record.levelno)
        if color:
            shown.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(shown)


def resolve_level(level: Union[int, str]) -> int:
    """Turn a level name such as "debug" into its number; INFO if unknown."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _console_handler(level: int, colored: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    formatter_cls = ColoredFormatter if colored else logging.Formatter
    handler.setFormatter(formatter_cls(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(log_file: Union[str, Path], level: int) -> logging.Handler:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_path, encoding='utf-8')
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logger(
    name: str = "",
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    colored: Optional[bool] = None,
) -> logging.Logger:
    """Attach console (and optionally file) handlers to a logger.

    Existing handlers are closed and replaced, so calling this twice does
    not duplicate output.

    Args:
        name: Logger name, the root logger when empty
        level: Level as a number or a name such as "DEBUG"
        log_file: Optional path of a UTF-8 log file
        colored: Color console output; defaults to whether stderr is a terminal

    Returns:
        The configured logger
    """
    numeric_level = resolve_level(level)
    if colored is None:
        colored = sys.stderr.isatty()

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_console_handler(numeric_level, colored))
    if log_file:
        logger.addHandler(_file_handler(log_file, numeric_level))

    if not name:
        for quiet in QUIET_LOGGERS:
            logging.getLogger(quiet).setLevel(max(numeric_level, logging.WARNING))

    return logger


def configure_logging(config: "Config", colored: Optional[bool] = None) -> logging.Logger:
    """Configure the root logger from application settings."""
    logger = setup_logger(level=config.log_level, log_file=config.log_file, colored=colored)
    logger.debug(f"Logging at {config.log_level} ({config.environment}), file {config.log_file}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger by name."""
    return logging.getLogger(name)
