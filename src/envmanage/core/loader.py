"""Lazy, fault-tolerant profile loading.

The :class:`LazyLoader` populates a :class:`ProfileSession` from a
:class:`~envmanage.core.profile_store.ProfileStore` on demand. Loading a
profile loads its dependencies first, wiring graph edges as it unwinds.

Failures in sibling dependencies are isolated: each one is wrapped in a
:class:`DependencyChainError` naming the profile that needed it, the loop
moves on to the next dependency, and the failures are reported together. A
profile is committed to the session only when all of its dependencies
loaded and linked cleanly; dependencies that did load stay loaded unless they
themselves depend on the failed profile, which happens inside a cycle.

Example:
    >>> loader = LazyLoader(JsonProfileStore(base_path))
    >>> loader.load("work")
    >>> loader.session.graph.resolve("work")
    ['base', 'work']
"""

from __future__ import annotations

from dataclasses import dataclass, field

from envmanage.core.dependency_graph import DependencyGraph
from envmanage.core.errors import (
    DependencyChainError,
    DependencyError,
    MultipleErrors,
    ProfileNotFoundError,
)
from envmanage.core.profile import Profile
from envmanage.core.profile_store import ProfileStore
from envmanage.utils.logger import get_logger

logger = get_logger("envmanage.core.loader")


@dataclass
class ProfileSession:
    """In-memory working set owned by one CLI invocation or UI instance.

    Attributes:
        profiles: Loaded profiles by name
        graph: Dependency graph over the loaded (and partially loaded) names
    """
    profiles: dict[str, Profile] = field(default_factory=dict)
    graph: DependencyGraph = field(default_factory=DependencyGraph)

    def has_profile(self, name: str) -> bool:
        return name in self.profiles

    def get_profile(self, name: str) -> Profile | None:
        return self.profiles.get(name)

    def profile_names(self) -> list[str]:
        return list(self.profiles)


def raise_collected(errors: list[DependencyError]) -> None:
    """Raise nothing, the single error, or a MultipleErrors aggregate."""
    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise MultipleErrors(errors)


class LazyLoader:
    """Loads profiles and their dependencies into a session on demand.

    Attributes:
        store: Where profile records are read from
        session: The session being populated
    """

    def __init__(self, store: ProfileStore, session: ProfileSession | None = None) -> None:
        self.store = store
        self.session = session if session is not None else ProfileSession()
        self._visiting: set[str] = set()

    def load(self, name: str) -> None:
        """Load a profile and its transitive dependencies.

        Already-loaded profiles return immediately. A profile that is
        currently being loaded further up the call stack also returns
        immediately; the cycle is then reported by the graph when the edge
        back to it is added during unwinding.

        Args:
            name: Profile to load

        Raises:
            ProfileNotFoundError: If ``name`` has no stored record
            ProfileIOError: If the record cannot be read
            ProfileParseError: If the record is malformed
            DependencyChainError: If exactly one dependency failed
            CircularDependencyError: Wrapped in a chain, if linking a
                dependency would create a cycle
            MultipleErrors: If several dependencies failed
        """
        if name in self.session.profiles or name in self._visiting:
            return

        self._visiting.add(name)
        try:
            self._load_record(name)
        except DependencyError:
            self._evict_dependents(name)
            raise
        finally:
            self._visiting.discard(name)

    def _evict_dependents(self, name: str) -> None:
        """Drop committed profiles whose closure reaches the failed ``name``.

        A profile depending on one that is still being loaded gets its edge
        and its commit before the cycle is found further up. Once ``name``
        fails, those commits are stale; evicting them makes each one fail
        on its own next load instead of short-circuiting as loaded.
        """
        graph = self.session.graph
        if name not in graph:
            return

        seen = {name}
        pending = [name]
        while pending:
            for parent in graph.get_parents(pending.pop()):
                if parent in seen:
                    continue
                seen.add(parent)
                pending.append(parent)
                if self.session.profiles.pop(parent, None) is not None:
                    logger.debug(f"Evicted profile '{parent}': depends on failed '{name}'")

    def _load_record(self, name: str) -> None:
        profile = self.store.read_profile(name)
        self.session.graph.add_node(name)

        errors: list[DependencyError] = []
        for dependency in profile.profiles:
            try:
                self.load(dependency)
                self.session.graph.add_edge(name, dependency)
            except DependencyError as e:
                logger.warning(f"Dependency '{dependency}' of '{name}' failed: {e}")
                errors.append(DependencyChainError(name, e))

        raise_collected(errors)

        self.session.profiles[name] = profile
        logger.debug(f"Loaded profile '{name}' ({len(profile.profiles)} dependencies)")

    def load_all(self, strict: bool = False) -> list[DependencyError]:
        """Load every stored profile.

        Names are loaded in sorted order; since :meth:`load` is idempotent
        the outcome does not depend on that order.

        Args:
            strict: Raise instead of returning the failures

        Returns:
            One error per stored profile that failed to load

        Raises:
            DependencyError: In strict mode, the single failure or a
                MultipleErrors aggregate
        """
        names = self.store.list_profile_names()
        logger.info(f"Loading {len(names)} profiles")

        failures: list[DependencyError] = []
        for name in names:
            try:
                self.load(name)
            except DependencyError as e:
                failures.append(e)

        logger.info(
            f"Loaded {len(self.session.profiles)}/{len(names)} profiles "
            f"({len(failures)} failed)"
        )
        if strict:
            raise_collected(failures)
        return failures

    # ------------------------------------------------------------------
    # Session edits
    # ------------------------------------------------------------------

    def unload(self, name: str) -> Profile | None:
        """Drop a profile and its graph node from the session.

        Returns:
            The removed profile, or None if it was not loaded
        """
        profile = self.session.profiles.pop(name, None)
        if name in self.session.graph:
            self.session.graph.remove_node(name)
        return profile

    def rename(self, old_name: str, new_name: str) -> None:
        """Rename a loaded profile in memory.

        The graph node is relabeled in place and every loaded profile that
        declared ``old_name`` now declares ``new_name``.

        Raises:
            ProfileNotFoundError: If ``old_name`` is not loaded
            ValueError: If ``new_name`` is already in use
        """
        if old_name not in self.session.profiles:
            raise ProfileNotFoundError(old_name)
        if new_name in self.session.profiles:
            raise ValueError(f"Profile '{new_name}' already exists")

        self.session.graph.rename_node(old_name, new_name)
        self.session.profiles[new_name] = self.session.profiles.pop(old_name)

        for profile in self.session.profiles.values():
            if old_name in profile.profiles:
                profile.profiles = [
                    new_name if dep == old_name else dep for dep in profile.profiles
                ]
        logger.debug(f"Renamed profile '{old_name}' to '{new_name}'")

    def rebuild_graph(self) -> DependencyGraph:
        """Replace the session graph with one built from the loaded profiles.

        Raises:
            DependencyNotFoundError, CircularDependencyError: From the build;
                the existing graph is kept in that case
        """
        self.session.graph = DependencyGraph.build(self.session.profiles)
        return self.session.graph
