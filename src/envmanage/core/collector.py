"""Merging variables across a dependency closure.

The collector turns a list of requested profiles into one variable mapping.
Profiles are merged in resolution order, deepest dependency first, so a
profile closer to the request overrides anything it inherits.

Example:
    >>> collector = VariableCollector(session)
    >>> collector.order(["work"])
    ['base', 'work']
    >>> collector.collect(["work"])
    {'EDITOR': 'code'}
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from envmanage.core.errors import ProfileNotFoundError
from envmanage.core.loader import ProfileSession
from envmanage.utils.logger import get_logger

logger = get_logger("envmanage.core.collector")


def parse_overrides(items: Iterable[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` items into a mapping.

    Items without ``=`` or with an empty key are skipped. Only the first
    ``=`` splits, so values may contain ``=``.
    """
    overrides: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if sep and key:
            overrides[key] = value
    return overrides


class VariableCollector:
    """Computes effective variables from a loaded session."""

    def __init__(self, session: ProfileSession) -> None:
        self.session = session

    def order(self, names: Iterable[str]) -> list[str]:
        """Return the merge order for the requested profiles.

        The union of each profile's resolution, first-seen order, followed
        by any requested name not already included.

        Raises:
            ProfileNotFoundError: If a profile is not in the graph
            CircularDependencyError: If a resolution walk finds a cycle
        """
        names = list(names)
        ordered: list[str] = []
        seen: set[str] = set()

        for name in names:
            for dependency in self.session.graph.resolve(name):
                if dependency not in seen:
                    seen.add(dependency)
                    ordered.append(dependency)

        for name in names:
            if name not in seen:
                seen.add(name)
                ordered.append(name)

        return ordered

    def collect(
        self,
        names: Iterable[str],
        overrides: Mapping[str, str] | None = None,
    ) -> dict[str, str]:
        """Merge the variables of the requested profiles and their closure.

        Args:
            names: Profiles to activate
            overrides: Explicit variables applied last

        Returns:
            The merged variable mapping

        Raises:
            ProfileNotFoundError: If a profile in the order is not loaded
            CircularDependencyError: If a resolution walk finds a cycle
        """
        merged: dict[str, str] = {}
        order = self.order(names)

        for name in order:
            profile = self.session.profiles.get(name)
            if profile is None:
                raise ProfileNotFoundError(name)
            merged.update(profile.variables)

        if overrides:
            merged.update(overrides)

        logger.debug(f"Collected {len(merged)} variables from {' -> '.join(order)}")
        return merged
