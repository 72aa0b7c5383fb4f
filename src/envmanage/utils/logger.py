"""
Logging setup for the ``envmanage`` logger hierarchy.

Core modules obtain their loggers with :func:`get_logger` using dotted names
under ``envmanage``; :func:`setup_logger` is called once on the package
logger (see ``envmanage.core.config.configure_logging``) and children
propagate to it.

Examples:
    >>> logger = setup_logger("envmanage", level="DEBUG",
    ...                       log_file=get_log_directory(base_path) / "envmanage.log")
    >>> get_logger("envmanage.core.loader").debug("Loaded profile 'work'")
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from .path_utils import ensure_directory

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# File records carry the source location, console records stay short
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
SIMPLE_FORMAT = "%(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def _level_number(level: str) -> int:
    if not isinstance(level, str) or level.upper() not in VALID_LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of {VALID_LOG_LEVELS}")
    return getattr(logging, level.upper())


def _is_file_handler(handler: logging.Handler) -> bool:
    return isinstance(handler, logging.handlers.RotatingFileHandler)


def setup_logger(
    name: str,
    level: str = "INFO",
    log_file: Path | None = None
) -> logging.Logger:
    """
    Configure a logger with a console handler and an optional rotating file.

    Calling it again for the same name updates the level but never stacks a
    second console or file handler.

    Args:
        name: Logger name, usually ``"envmanage"``.
        level: One of :data:`VALID_LOG_LEVELS`, case-insensitive.
        log_file: Where to write detailed DEBUG-level records, if anywhere.

    Raises:
        ValueError: If level is not a valid log level.
    """
    logger = logging.getLogger(name)
    logger.setLevel(_level_number(level))

    if not any(not _is_file_handler(h) for h in logger.handlers):
        add_console_handler(logger, level)
    if log_file is not None and not any(_is_file_handler(h) for h in logger.handlers):
        add_file_handler(logger, log_file)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Return the logger for ``name``.

    Dotted names, and loggers that can already reach a handler, are returned
    as is so records propagate to whatever the application configured.
    A bare top-level name with no handler gets a default INFO console one.
    """
    logger = logging.getLogger(name)
    if "." in name or logger.hasHandlers():
        return logger
    return setup_logger(name)


def add_file_handler(logger: logging.Logger, log_file: Path, level: str = "DEBUG") -> None:
    """
    Attach a rotating UTF-8 file handler, creating the log directory.

    Raises:
        ValueError: If level is not valid.
        OSError: If the log directory cannot be created.
    """
    handler_level = _level_number(level)
    ensure_directory(log_file.parent)

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding='utf-8'
    )
    handler.setLevel(handler_level)
    handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def add_console_handler(logger: logging.Logger, level: str = "INFO") -> None:
    """Attach a stderr handler using the short format."""
    handler = logging.StreamHandler()
    handler.setLevel(_level_number(level))
    handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
    logger.addHandler(handler)


def get_log_directory(base_path: Path) -> Path:
    """Directory for log files under a manager base path (not created)."""
    return base_path / "logs"
