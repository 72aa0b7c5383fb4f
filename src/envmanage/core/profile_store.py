"""Profile storage boundary.

The core never touches storage directly; it reads records through the
:class:`ProfileStore` protocol. Two implementations are provided:

- :class:`InMemoryProfileStore` keeps records in a dict, for tests and for
  callers that assemble profiles themselves.
- :class:`JsonProfileStore` keeps one ``<name>.json`` file per profile under
  ``<base_path>/profiles`` and the global profile in ``<base_path>/global.json``.

Besides named profiles every store holds one global profile: the set of
profiles and variables applied in every shell. It has no name and never
takes part in the dependency graph.

Example:
    >>> store = JsonProfileStore(Path("~/.config/env-manage"))
    >>> store.write_profile("base", Profile(variables={"EDITOR": "vim"}))
    >>> store.read_profile("base").variables
    {'EDITOR': 'vim'}
"""

from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path
from typing import Protocol

from envmanage.core.errors import (
    ProfileIOError,
    ProfileNotFoundError,
    ProfileParseError,
)
from envmanage.core.profile import Profile, validate_profile_name
from envmanage.utils.logger import get_logger
from envmanage.utils.path_utils import (
    ensure_directory,
    normalize_path,
    profile_file_path,
    scan_profile_names,
)

logger = get_logger("envmanage.core.profile_store")

# Label used in errors about the global profile record
GLOBAL_PROFILE_NAME = "global"
GLOBAL_FILE_NAME = "global.json"


class ProfileStore(Protocol):
    """Durable map of profile name to Profile."""

    def read_profile(self, name: str) -> Profile:
        """Return the stored record.

        Raises:
            ProfileNotFoundError, ProfileIOError, ProfileParseError
        """
        ...

    def list_profile_names(self) -> list[str]:
        ...

    def write_profile(self, name: str, profile: Profile) -> None:
        ...

    def delete_profile(self, name: str) -> None:
        ...

    def rename_profile(self, old_name: str, new_name: str) -> None:
        ...

    def read_global(self) -> Profile:
        """Return the global profile; empty if none was saved."""
        ...

    def write_global(self, profile: Profile) -> None:
        ...


class InMemoryProfileStore:
    """Dict-backed store. Records are copied on the way in and out."""

    def __init__(self, profiles: dict[str, Profile] | None = None) -> None:
        self._profiles: dict[str, Profile] = deepcopy(profiles) if profiles else {}
        self._global = Profile()

    def read_profile(self, name: str) -> Profile:
        if name not in self._profiles:
            raise ProfileNotFoundError(name)
        return deepcopy(self._profiles[name])

    def list_profile_names(self) -> list[str]:
        return sorted(self._profiles)

    def write_profile(self, name: str, profile: Profile) -> None:
        validate_profile_name(name)
        self._profiles[name] = deepcopy(profile)

    def delete_profile(self, name: str) -> None:
        self._profiles.pop(name, None)

    def rename_profile(self, old_name: str, new_name: str) -> None:
        if old_name not in self._profiles:
            raise ProfileNotFoundError(old_name)
        if new_name in self._profiles:
            raise ValueError(f"Profile '{new_name}' already exists.")
        validate_profile_name(new_name)
        self._profiles[new_name] = self._profiles.pop(old_name)

    def read_global(self) -> Profile:
        return deepcopy(self._global)

    def write_global(self, profile: Profile) -> None:
        self._global = deepcopy(profile)


class JsonProfileStore:
    """Directory of JSON profile records.

    Attributes:
        base_path: Manager base directory
        profiles_dir: ``base_path / "profiles"``, holding one file per profile
        global_path: ``base_path / "global.json"``, the global profile
    """

    def __init__(self, base_path: Path | str) -> None:
        self.base_path = normalize_path(base_path)
        self.profiles_dir = self.base_path / "profiles"
        self.global_path = self.base_path / GLOBAL_FILE_NAME

    def _record_path(self, name: str) -> Path:
        # Names that would leave profiles_dir cannot have a record
        file_path = profile_file_path(self.profiles_dir, name)
        if file_path.parent != self.profiles_dir or file_path.stem != name:
            raise ProfileNotFoundError(name)
        return file_path

    def _read_record(self, name: str, file_path: Path, allow_empty: bool = False) -> Profile:
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()
            if allow_empty and not content.strip():
                return Profile()
            profile = Profile.from_dict(json.loads(content))
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in profile file {file_path}: {e}")
            raise ProfileParseError(name, e) from e
        except ValueError as e:
            logger.error(f"Malformed profile {file_path}: {e}")
            raise ProfileParseError(name, e) from e
        except OSError as e:
            logger.error(f"Failed to read profile file {file_path}: {e}")
            raise ProfileIOError(name, e) from e

        logger.debug(f"Profile '{name}' loaded from {file_path}")
        return profile

    def _write_record(self, name: str, file_path: Path, profile: Profile) -> None:
        profile.validate()
        try:
            ensure_directory(file_path.parent)
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(profile.to_dict(), f, indent=2)
        except OSError as e:
            logger.error(f"Failed to write profile to {file_path}: {e}")
            raise ProfileIOError(name, e) from e

        logger.debug(f"Profile '{name}' saved to {file_path}")

    def read_profile(self, name: str) -> Profile:
        """Load a profile record.

        Raises:
            ProfileNotFoundError: If no record exists for ``name``
            ProfileIOError: If the record cannot be read
            ProfileParseError: If the record is not valid JSON or has
                malformed fields
        """
        file_path = self._record_path(name)
        if not file_path.exists():
            logger.debug(f"Profile file not found: {file_path}")
            raise ProfileNotFoundError(name)
        return self._read_record(name, file_path)

    def list_profile_names(self) -> list[str]:
        return scan_profile_names(self.profiles_dir)

    def write_profile(self, name: str, profile: Profile) -> None:
        """Write a profile record, creating the profiles directory if needed.

        Raises:
            InvalidProfileNameError: If ``name`` is not a valid profile name
            ValueError: If the profile fails validation
            ProfileIOError: If the file cannot be written
        """
        validate_profile_name(name)
        self._write_record(name, profile_file_path(self.profiles_dir, name), profile)

    def delete_profile(self, name: str) -> None:
        try:
            file_path = self._record_path(name)
        except ProfileNotFoundError:
            return
        if not file_path.exists():
            return
        try:
            file_path.unlink()
        except OSError as e:
            raise ProfileIOError(name, e) from e
        logger.debug(f"Profile '{name}' deleted")

    def rename_profile(self, old_name: str, new_name: str) -> None:
        """Rename a record on disk.

        Raises:
            ProfileNotFoundError: If ``old_name`` has no record
            InvalidProfileNameError: If ``new_name`` is not a valid name
            ValueError: If ``new_name`` already has a record
            ProfileIOError: If the rename fails
        """
        old_path = self._record_path(old_name)
        if not old_path.exists():
            raise ProfileNotFoundError(old_name)

        validate_profile_name(new_name)
        new_path = profile_file_path(self.profiles_dir, new_name)
        if new_path.exists():
            raise ValueError(f"Profile '{new_name}' already exists.")

        try:
            old_path.rename(new_path)
        except OSError as e:
            raise ProfileIOError(old_name, e) from e
        logger.debug(f"Profile '{old_name}' renamed to '{new_name}'")

    def read_global(self) -> Profile:
        """Load the global profile.

        A missing or blank ``global.json`` is an empty profile.

        Raises:
            ProfileIOError, ProfileParseError: As for :meth:`read_profile`
        """
        if not self.global_path.exists():
            return Profile()
        return self._read_record(GLOBAL_PROFILE_NAME, self.global_path, allow_empty=True)

    def write_global(self, profile: Profile) -> None:
        self._write_record(GLOBAL_PROFILE_NAME, self.global_path, profile)
