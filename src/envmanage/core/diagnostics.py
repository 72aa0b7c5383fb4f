"""Consistency checks and automatic repair for stored profiles.

:func:`check_profiles` loads every stored profile into a fresh session and
reports each problem found. :func:`fix_profiles` repairs what can be repaired
mechanically by deleting the offending dependency declaration: a reference
to a missing profile, or the edge that closes a cycle.

Example:
    >>> report = check_profiles(store)
    >>> for issue in report.issues:
    ...     print(issue)
    >>> fix_profiles(store)
    [('work', 'missing')]
"""

from __future__ import annotations

from dataclasses import dataclass, field

from envmanage.core.errors import (
    CircularDependencyError,
    DependencyChainError,
    DependencyError,
    DependencyNotFoundError,
    InvalidProfileNameError,
    MultipleErrors,
    ProfileNotFoundError,
)
from envmanage.core.loader import LazyLoader
from envmanage.core.profile import validate_profile_name
from envmanage.core.profile_store import ProfileStore
from envmanage.utils.logger import get_logger

logger = get_logger("envmanage.core.diagnostics")

# (profile, dependency) declaration to delete
Fix = tuple[str, str]


@dataclass
class CheckReport:
    """Outcome of :func:`check_profiles`.

    Attributes:
        checked: Stored profile names that were examined
        issues: Problems found, aggregates flattened one level
    """
    checked: list[str] = field(default_factory=list)
    issues: list[DependencyError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def check_profiles(store: ProfileStore) -> CheckReport:
    """Validate names and dependencies of every stored profile."""
    report = CheckReport(checked=store.list_profile_names())
    loader = LazyLoader(store)

    for name in report.checked:
        try:
            validate_profile_name(name)
        except InvalidProfileNameError as e:
            report.issues.append(e)

        try:
            loader.load(name)
        except MultipleErrors as e:
            report.issues.extend(e.errors)
        except DependencyError as e:
            report.issues.append(e)

    if report.ok:
        logger.info(f"All {len(report.checked)} profiles are valid")
    else:
        logger.warning(f"Found {len(report.issues)} issue(s) in {len(report.checked)} profiles")
    return report


def suggest_fixes(error: DependencyError) -> list[Fix]:
    """List the dependency declarations whose removal resolves ``error``.

    Args:
        error: A failure reported by the loader or the graph

    Returns:
        ``(profile, dependency)`` pairs, deduplicated, in discovery order
    """
    fixes: list[Fix] = []

    def visit(err: DependencyError) -> None:
        if isinstance(err, DependencyChainError):
            if isinstance(err.cause, ProfileNotFoundError):
                fixes.append((err.profile, err.cause.name))
            else:
                visit(err.cause)
        elif isinstance(err, DependencyNotFoundError):
            fixes.append((err.parent, err.dependency))
        elif isinstance(err, CircularDependencyError):
            if len(err.cycle) >= 2:
                fixes.append((err.cycle[-2], err.cycle[-1]))
        elif isinstance(err, MultipleErrors):
            for member in err.errors:
                visit(member)

    visit(error)
    return list(dict.fromkeys(fixes))


def _remove_dependency(store: ProfileStore, profile_name: str, dependency: str) -> bool:
    try:
        profile = store.read_profile(profile_name)
    except DependencyError as e:
        logger.warning(f"Cannot edit profile '{profile_name}': {e}")
        return False

    if dependency not in profile.profiles:
        return False

    profile.remove_profile(dependency)
    try:
        store.write_profile(profile_name, profile)
    except DependencyError as e:
        logger.warning(f"Cannot save profile '{profile_name}': {e}")
        return False
    logger.info(f"Removed dependency '{dependency}' from profile '{profile_name}'")
    return True


def fix_profiles(store: ProfileStore) -> list[Fix]:
    """Repair stored profiles until they load cleanly or nothing more helps.

    Each round loads everything into a fresh session, applies the suggested
    fixes for every failure, and starts over if anything changed. Each
    applied fix deletes one declaration, so the loop terminates.

    Returns:
        The ``(profile, dependency)`` declarations that were removed
    """
    applied: list[Fix] = []

    while True:
        failures = LazyLoader(store).load_all()
        progress = False
        for error in failures:
            for profile_name, dependency in suggest_fixes(error):
                if _remove_dependency(store, profile_name, dependency):
                    applied.append((profile_name, dependency))
                    progress = True
        if not progress:
            break

    logger.info(f"Fixed {len(applied)} dependency declaration(s)")
    return applied
