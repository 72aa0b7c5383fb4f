"""Editing the global profile.

The global profile lists profiles and variables that apply in every shell.
It is stored apart from named profiles (see
:meth:`~envmanage.core.profile_store.ProfileStore.read_global`) and uses the
same item syntax as activation: ``KEY=VALUE`` sets a variable, a bare word
names a profile.

Example:
    >>> add_global_items(store, ["base", "EDITOR=vim"])
    GlobalChange(profiles=['base'], variables=['EDITOR'], missing=[])
    >>> clean_global(store, collector)
    {'PAGER': 'less', 'EDITOR': 'vim'}
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from envmanage.core.collector import VariableCollector
from envmanage.core.errors import ProfileNotFoundError
from envmanage.core.profile_store import ProfileStore
from envmanage.utils.logger import get_logger

logger = get_logger("envmanage.core.global_profile")


@dataclass
class GlobalChange:
    """What an add or remove call changed.

    Attributes:
        profiles: Profile names added or removed
        variables: Variable keys added or removed
        missing: Items a removal found nothing for
    """
    profiles: list[str] = field(default_factory=list)
    variables: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.profiles or self.variables)


def add_global_items(store: ProfileStore, items: Iterable[str]) -> GlobalChange:
    """Add profiles and ``KEY=VALUE`` variables to the global profile.

    Items with an empty key are ignored. Nothing is written unless every
    named profile exists.

    Raises:
        ProfileNotFoundError: If a named profile is not stored
    """
    global_profile = store.read_global()
    known = set(store.list_profile_names())
    change = GlobalChange()

    for item in items:
        key, sep, value = item.partition("=")
        if sep:
            if key:
                global_profile.add_variable(key, value)
                change.variables.append(key)
        else:
            if item not in known:
                raise ProfileNotFoundError(item)
            global_profile.add_profile(item)
            change.profiles.append(item)

    if change.changed:
        store.write_global(global_profile)
        logger.info(
            f"Added to global profile: {len(change.profiles)} profile(s), "
            f"{len(change.variables)} variable(s)"
        )
    return change


def remove_global_items(store: ProfileStore, items: Iterable[str]) -> GlobalChange:
    """Remove variables or profiles from the global profile.

    Each item is tried as a variable key first, then as a profile name.
    """
    global_profile = store.read_global()
    change = GlobalChange()

    for item in items:
        if global_profile.remove_variable(item) is not None:
            change.variables.append(item)
        elif item in global_profile.profiles:
            global_profile.remove_profile(item)
            change.profiles.append(item)
        else:
            change.missing.append(item)

    if change.changed:
        store.write_global(global_profile)
    if change.missing:
        logger.info(f"Not in global profile: {', '.join(change.missing)}")
    return change


def clean_global(store: ProfileStore, collector: VariableCollector) -> dict[str, str]:
    """Empty the global profile.

    Args:
        store: Store holding the global profile
        collector: Collector over a session with the global profile's
            dependencies loaded

    Returns:
        The variables the global profile used to set, so the caller can
        unset them

    Raises:
        DependencyError: If the global profile's dependencies cannot be
            collected; the profile is left untouched
    """
    global_profile = store.read_global()
    variables = global_profile.collect_vars(collector)

    global_profile.clear()
    store.write_global(global_profile)
    logger.info(f"Cleaned global profile ({len(variables)} variables)")
    return variables
