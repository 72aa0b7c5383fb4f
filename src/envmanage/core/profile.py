"""Profile data model.

A profile is a named bundle of environment variables plus an ordered list of
other profiles it inherits from. The name itself is not part of the record;
stores and sessions key profiles by name.

Example:
    >>> work = Profile.from_dict({"profiles": ["base"], "variables": {"EDITOR": "code"}})
    >>> work.to_dict()
    {'variables': {'EDITOR': 'code'}, 'profiles': ['base']}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from envmanage.core.errors import InvalidProfileNameError
from envmanage.utils.logger import get_logger

if TYPE_CHECKING:
    from envmanage.core.collector import VariableCollector

logger = get_logger("envmanage.core.profile")

# Characters allowed in profile names besides ASCII letters, digits and "_"
EXTRA_NAME_CHARS = {"-"}


def validate_profile_name(name: str) -> None:
    """Check that a profile name is a valid identifier.

    Names must be non-empty, start with an ASCII letter or underscore, and
    contain only ASCII letters, digits, underscores and hyphens.

    Raises:
        InvalidProfileNameError: With the reason the name was rejected
    """
    if not name:
        raise InvalidProfileNameError(name, "Identifier cannot be empty")

    first = name[0]
    if first.isascii() and first.isdigit():
        raise InvalidProfileNameError(
            name,
            "Identifier cannot start with a digit, must start with a letter or underscore",
        )
    if not (first.isascii() and first.isalpha()) and first != "_":
        raise InvalidProfileNameError(
            name, f"Identifier contains invalid character '{first}'"
        )

    for ch in name:
        if (ch.isascii() and ch.isalnum()) or ch == "_" or ch in EXTRA_NAME_CHARS:
            continue
        raise InvalidProfileNameError(
            name,
            f"Identifier contains invalid character '{ch}', only letters, "
            "digits, underscores and hyphens are allowed",
        )


@dataclass
class Profile:
    """A bundle of environment variables with inherited profiles.

    Attributes:
        variables: Environment variables set by this profile
        profiles: Names of the profiles this one depends on, in declaration
            order; duplicates are tolerated
    """

    variables: dict[str, str] = field(default_factory=dict)
    profiles: list[str] = field(default_factory=list)

    def clear(self) -> None:
        self.variables.clear()
        self.profiles.clear()

    def is_empty(self) -> bool:
        return not self.variables and not self.profiles

    def add_profile(self, name: str) -> None:
        self.profiles.append(name)

    def remove_profile(self, name: str) -> None:
        """Remove every occurrence of ``name`` from the dependency list."""
        self.profiles = [p for p in self.profiles if p != name]

    def add_variable(self, key: str, value: str) -> None:
        self.variables[key] = value

    def remove_variable(self, key: str) -> str | None:
        return self.variables.pop(key, None)

    def collect_vars(self, collector: VariableCollector) -> dict[str, str]:
        """Compute the effective variables of this profile.

        Inherited variables are merged in dependency order, then this
        profile's own variables are layered on top so they always win.

        Args:
            collector: Collector bound to a loaded session

        Returns:
            The merged variable mapping

        Raises:
            DependencyError: If a dependency cannot be resolved
        """
        merged = collector.collect(self.profiles)
        merged.update(self.variables)
        return merged

    def validate(self) -> None:
        """Validate field types.

        Raises:
            ValueError: If any field has the wrong shape
        """
        if not isinstance(self.variables, dict):
            raise ValueError("Field 'variables' must be a table of strings")
        for key, value in self.variables.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise ValueError(
                    f"Variable {key!r} must map a string to a string, got {value!r}"
                )

        if not isinstance(self.profiles, list):
            raise ValueError("Field 'profiles' must be a list of profile names")
        for name in self.profiles:
            if not isinstance(name, str):
                raise ValueError(f"Dependency {name!r} must be a string")

    def to_dict(self) -> dict[str, Any]:
        """Convert the profile to a dictionary for JSON serialization."""
        return {
            "variables": dict(self.variables),
            "profiles": list(self.profiles),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Profile:
        """Create a profile from a dictionary.

        Missing fields default to empty.

        Raises:
            ValueError: If ``data`` is not a mapping or a field is malformed
        """
        if not isinstance(data, dict):
            raise ValueError(f"Profile record must be a table, got {type(data).__name__}")

        variables = data.get("variables", {})
        profiles = data.get("profiles", [])
        profile = cls(
            variables=dict(variables) if isinstance(variables, dict) else variables,
            profiles=list(profiles) if isinstance(profiles, list) else profiles,
        )
        profile.validate()
        return profile
