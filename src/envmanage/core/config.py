"""Manager configuration.

This module defines the :class:`ManagerConfig` dataclass describing where
profiles live and how the manager logs, plus the helpers that turn a
configuration into a ready-to-use store and logger.

Example:
    >>> config = ManagerConfig.default()
    >>> config.profiles_dir
    PosixPath('/home/user/.config/env-manage/profiles')
    >>> logger = configure_logging(config)
    >>> store = open_store(config)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from envmanage.core.profile_store import JsonProfileStore
from envmanage.utils.logger import (
    VALID_LOG_LEVELS,
    get_log_directory,
    get_logger,
    setup_logger,
)
from envmanage.utils.path_utils import ensure_directory, normalize_path

logger = get_logger("envmanage.core.config")

# Environment variable overriding the default base directory
HOME_ENV_VAR = "ENV_MANAGE_HOME"

DEFAULT_BASE_PATH = Path("~/.config/env-manage")


@dataclass
class ManagerConfig:
    """Configuration for one manager session.

    Attributes:
        base_path: Directory holding ``profiles/`` and ``logs/``
        log_level: Console log level
        log_file: Optional log file; relative paths are taken under
            ``base_path/logs``
    """

    base_path: Path = DEFAULT_BASE_PATH
    log_level: str = "WARNING"
    log_file: Path | None = None

    def __post_init__(self) -> None:
        self.base_path = normalize_path(self.base_path)
        if self.log_file is not None:
            log_file = Path(self.log_file).expanduser()
            self.log_file = (
                log_file if log_file.is_absolute() else self.log_dir / log_file
            )

    @classmethod
    def default(cls) -> ManagerConfig:
        """Configuration rooted at ``$ENV_MANAGE_HOME`` or ``~/.config/env-manage``."""
        base = os.environ.get(HOME_ENV_VAR, "").strip()
        return cls(base_path=Path(base) if base else DEFAULT_BASE_PATH)

    @property
    def profiles_dir(self) -> Path:
        return self.base_path / "profiles"

    @property
    def log_dir(self) -> Path:
        return get_log_directory(self.base_path)

    def validate(self) -> None:
        """Validate the configuration.

        Raises:
            ValueError: If any validation check fails
        """
        if not isinstance(self.log_level, str) or self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. Expected one of {VALID_LOG_LEVELS}"
            )
        if self.base_path.exists() and not self.base_path.is_dir():
            raise ValueError(f"base_path is not a directory: {self.base_path}")

        logger.debug(f"Configuration for {self.base_path} validated successfully")

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_path": str(self.base_path),
            "log_level": self.log_level,
            "log_file": str(self.log_file) if self.log_file is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ManagerConfig:
        """Create configuration from a dictionary.

        Missing keys fall back to the defaults.

        Raises:
            ValueError: If the resulting configuration is invalid
        """
        log_file = data.get("log_file")
        config = cls(
            base_path=Path(data.get("base_path", DEFAULT_BASE_PATH)),
            log_level=data.get("log_level", "WARNING"),
            log_file=Path(log_file) if log_file else None,
        )
        config.validate()
        return config


def configure_logging(config: ManagerConfig) -> logging.Logger:
    """Set up the ``envmanage`` logger from a configuration."""
    config.validate()
    return setup_logger("envmanage", level=config.log_level, log_file=config.log_file)


def open_store(config: ManagerConfig) -> JsonProfileStore:
    """Create the profiles directory if needed and return a store over it."""
    config.validate()
    ensure_directory(config.profiles_dir)
    return JsonProfileStore(config.base_path)
