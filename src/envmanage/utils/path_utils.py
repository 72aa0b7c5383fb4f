"""
Path utilities for the profile directory layout.

This module provides the small set of pathlib helpers used by the
configuration layer and the JSON profile store: path normalization,
directory creation, and mapping profile names to record files.

Examples:
    >>> from envmanage.utils.path_utils import normalize_path, profile_file_path
    >>> base = normalize_path("~/.config/env-manage")
    >>> profile_file_path(base / "profiles", "work")
    PosixPath('/home/user/.config/env-manage/profiles/work.json')
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

# Type alias for path-like objects
PathLike = Union[str, Path]

# Extension used for stored profile records
PROFILE_EXTENSION = ".json"


def normalize_path(path: PathLike) -> Path:
    """
    Convert a string or Path object to a normalized absolute Path.

    Handles home-directory expansion (~) and resolves relative paths.

    Args:
        path: A file system path as string or Path object.

    Returns:
        Normalized absolute Path object.

    Raises:
        ValueError: If path is empty or None.

    Examples:
        >>> normalize_path("~/.config/env-manage")
        PosixPath('/home/user/.config/env-manage')
    """
    if path is None or (isinstance(path, str) and not path.strip()):
        raise ValueError("Path cannot be None or empty")

    return Path(path).expanduser().resolve()


def ensure_directory(path: Path) -> Path:
    """
    Create directory if it doesn't exist, return Path.

    Args:
        path: Directory path to create.

    Returns:
        The directory Path object.

    Raises:
        OSError: If directory creation fails.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def profile_file_path(profiles_dir: Path, name: str) -> Path:
    """
    Return the record file for a profile name.

    Args:
        profiles_dir: Directory holding the profile records.
        name: Profile name (without extension).

    Returns:
        Path of ``<profiles_dir>/<name>.json``.
    """
    return profiles_dir / f"{name}{PROFILE_EXTENSION}"


def scan_profile_names(profiles_dir: Path) -> list[str]:
    """
    List profile names stored in a directory.

    Only regular files carrying the profile extension are considered.
    A missing directory yields an empty list.

    Args:
        profiles_dir: Directory holding the profile records.

    Returns:
        Sorted list of profile names (file stems).

    Raises:
        OSError: If the directory exists but cannot be listed.
    """
    if not profiles_dir.exists():
        return []

    names = [
        entry.stem
        for entry in profiles_dir.iterdir()
        if entry.is_file() and entry.suffix == PROFILE_EXTENSION
    ]
    return sorted(names)
