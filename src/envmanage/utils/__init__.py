"""
Utility modules for paths and logging.

This package provides:
- Path utilities for the profile directory layout
- Logging infrastructure with file and console output

Examples:
    >>> from envmanage.utils import normalize_path, setup_logger
    >>> base = normalize_path("~/.config/env-manage")
    >>> logger = setup_logger("envmanage")
"""

from .path_utils import (
    # Type alias
    PathLike,
    # Constants
    PROFILE_EXTENSION,
    # Path helpers
    normalize_path,
    ensure_directory,
    profile_file_path,
    scan_profile_names,
)

from .logger import (
    # Logger setup
    setup_logger,
    get_logger,
    # Handler management
    add_file_handler,
    add_console_handler,
    # Utilities
    get_log_directory,
    # Constants
    VALID_LOG_LEVELS,
)

__all__ = [
    # Type alias
    "PathLike",
    # Path utilities
    "PROFILE_EXTENSION",
    "normalize_path",
    "ensure_directory",
    "profile_file_path",
    "scan_profile_names",
    # Logger
    "setup_logger",
    "get_logger",
    "add_file_handler",
    "add_console_handler",
    "get_log_directory",
    "VALID_LOG_LEVELS",
]
