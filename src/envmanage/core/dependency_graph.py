"""Dependency graph over profile names.

This module provides the directed acyclic graph behind profile inheritance.
An edge ``parent -> dependency`` means the parent profile needs the
dependency's variables. The graph refuses any mutation that would close a
cycle, finds paths for diagnostics, and resolves a profile's transitive
dependencies into activation order (deepest dependency first).

Nodes live in an arena: a dense slot table of names plus a ``name -> index``
map, with adjacency kept by index. Renaming a profile relabels its slot and
leaves every edge untouched.

Example:
    >>> from envmanage.core.dependency_graph import DependencyGraph
    >>>
    >>> graph = DependencyGraph()
    >>> graph.add_node("base")
    >>> graph.add_node("work")
    >>> graph.add_edge("work", "base")
    >>> graph.resolve("work")
    ['base', 'work']
"""

from __future__ import annotations

from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from envmanage.core.errors import (
    CircularDependencyError,
    DependencyNotFoundError,
    ProfileNotFoundError,
)
from envmanage.utils.logger import get_logger

if TYPE_CHECKING:
    from envmanage.core.profile import Profile

logger = get_logger("envmanage.core.dependency_graph")


@dataclass
class DependencyGraph:
    """Arena-backed DAG of profile names.

    Attributes:
        slots: Node labels by index; ``None`` marks a removed node
        indices: Map from profile name to its slot index
        adjacency_list: Forward adjacency (index -> dependency indices),
            kept in insertion order
        reverse_adjacency: Reverse adjacency (index -> dependent indices)

    Example:
        >>> graph = DependencyGraph.build({"base": base, "work": work})
        >>> graph.get_parents("base")
        ['work']
    """
    slots: list[str | None] = field(default_factory=list)
    indices: dict[str, int] = field(default_factory=dict)
    adjacency_list: dict[int, list[int]] = field(default_factory=dict)
    reverse_adjacency: dict[int, list[int]] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def build(cls, profiles: Mapping[str, "Profile"]) -> DependencyGraph:
        """Build a graph from a complete set of profiles.

        Every name is registered before any edge is added, so the result does
        not depend on the mapping's iteration order.

        Args:
            profiles: Mapping of profile name to Profile

        Returns:
            The populated graph

        Raises:
            DependencyNotFoundError: A profile declares an unknown dependency
            CircularDependencyError: The declared dependencies contain a cycle
        """
        graph = cls()
        for name in profiles:
            graph.add_node(name)

        for name, profile in profiles.items():
            for dependency in profile.profiles:
                if dependency not in graph.indices:
                    raise DependencyNotFoundError(name, dependency)
                graph.add_edge(name, dependency)

        logger.info(
            f"Dependency graph built: {graph.node_count} nodes, "
            f"{graph.edge_count} edges"
        )
        return graph

    # ------------------------------------------------------------------
    # Node operations
    # ------------------------------------------------------------------

    def add_node(self, name: str) -> int:
        """Register a profile name, returning its index.

        Adding a name that is already registered is a no-op.
        """
        if name in self.indices:
            return self.indices[name]

        index = len(self.slots)
        self.slots.append(name)
        self.indices[name] = index
        self.adjacency_list[index] = []
        self.reverse_adjacency[index] = []
        logger.debug(f"Added node: {name}")
        return index

    def remove_node(self, name: str) -> None:
        """Remove a profile and every edge touching it.

        Raises:
            ProfileNotFoundError: If the name is not registered
        """
        index = self._index_of(name)

        for dependency in self.adjacency_list.pop(index):
            self.reverse_adjacency[dependency].remove(index)
        for dependent in self.reverse_adjacency.pop(index):
            self.adjacency_list[dependent].remove(index)

        self.slots[index] = None
        del self.indices[name]
        logger.debug(f"Removed node: {name}")

    def rename_node(self, old_name: str, new_name: str) -> None:
        """Relabel a node in place, keeping all of its edges.

        Raises:
            ProfileNotFoundError: If ``old_name`` is not registered
            ValueError: If ``new_name`` already names another node
        """
        index = self._index_of(old_name)
        if new_name == old_name:
            return
        if new_name in self.indices:
            raise ValueError(f"Profile '{new_name}' already exists")

        self.slots[index] = new_name
        del self.indices[old_name]
        self.indices[new_name] = index
        logger.debug(f"Renamed node: {old_name} -> {new_name}")

    def has_node(self, name: str) -> bool:
        return name in self.indices

    def names(self) -> list[str]:
        """Registered profile names in insertion order."""
        return [name for name in self.slots if name is not None]

    @property
    def node_count(self) -> int:
        return len(self.indices)

    @property
    def edge_count(self) -> int:
        return sum(len(deps) for deps in self.adjacency_list.values())

    def __contains__(self, name: object) -> bool:
        return name in self.indices

    def __len__(self) -> int:
        return len(self.indices)

    # ------------------------------------------------------------------
    # Edge operations
    # ------------------------------------------------------------------

    def add_edge(self, parent: str, dependency: str) -> None:
        """Declare that ``parent`` depends on ``dependency``.

        The edge is refused when a path ``dependency -> ... -> parent``
        already exists (including ``dependency == parent``), because the new
        edge would close it into a cycle. A refused edge leaves the graph
        unchanged. Adding an existing edge is a no-op.

        Args:
            parent: The dependent profile
            dependency: The profile it needs

        Raises:
            ProfileNotFoundError: If ``parent`` is not registered
            DependencyNotFoundError: If ``dependency`` is not registered
            CircularDependencyError: If the edge would create a cycle; the
                error's ``cycle`` starts and ends with ``parent``
        """
        parent_index, dependency_index = self._edge_indices(parent, dependency)

        if dependency_index in self.adjacency_list[parent_index]:
            return

        if self._has_path(dependency_index, parent_index):
            cycle = [parent] + self._cycle_tail(dependency, parent)
            logger.warning(f"Rejected edge {parent} -> {dependency}: {' -> '.join(cycle)}")
            raise CircularDependencyError(cycle)

        self.adjacency_list[parent_index].append(dependency_index)
        self.reverse_adjacency[dependency_index].append(parent_index)
        logger.debug(f"Added edge: {parent} -> {dependency}")

    def remove_edge(self, parent: str, dependency: str) -> None:
        """Remove the edge ``parent -> dependency`` if present.

        Removing an edge that does not exist is not an error.

        Raises:
            ProfileNotFoundError: If ``parent`` is not registered
            DependencyNotFoundError: If ``dependency`` is not registered
        """
        parent_index, dependency_index = self._edge_indices(parent, dependency)

        if dependency_index not in self.adjacency_list[parent_index]:
            return

        self.adjacency_list[parent_index].remove(dependency_index)
        self.reverse_adjacency[dependency_index].remove(parent_index)
        logger.debug(f"Removed edge: {parent} -> {dependency}")

    def has_edge(self, parent: str, dependency: str) -> bool:
        if parent not in self.indices or dependency not in self.indices:
            return False
        return self.indices[dependency] in self.adjacency_list[self.indices[parent]]

    def get_dependencies(self, name: str) -> list[str]:
        """Direct dependencies of a profile, in the order they were added.

        Raises:
            ProfileNotFoundError: If the name is not registered
        """
        index = self._index_of(name)
        return [self._label(i) for i in self.adjacency_list[index]]

    def get_parents(self, name: str) -> list[str]:
        """Profiles that declare ``name`` as a direct dependency.

        An isolated node yields an empty list.

        Raises:
            ProfileNotFoundError: If the name is not registered
        """
        index = self._index_of(name)
        return [self._label(i) for i in self.reverse_adjacency[index]]

    # ------------------------------------------------------------------
    # Path finding
    # ------------------------------------------------------------------

    def find_path(self, start: str, end: str) -> list[str] | None:
        """Find a dependency path from ``start`` to ``end``.

        Returns the first path discovered by depth-first search, which is
        not necessarily the shortest. Both endpoints are included.

        Args:
            start: Profile to search from
            end: Profile to reach

        Returns:
            List of names ``[start, ..., end]`` or None if no path exists or
            either name is unknown
        """
        if start not in self.indices or end not in self.indices:
            return None

        end_index = self.indices[end]
        visited: set[int] = set()
        path_stack = [self.indices[start]]

        def dfs(current: int) -> bool:
            visited.add(current)
            for child in self.adjacency_list[current]:
                if child in visited:
                    continue
                path_stack.append(child)
                if child == end_index or dfs(child):
                    return True
                path_stack.pop()
            return False

        if dfs(path_stack[0]):
            return [self._label(i) for i in path_stack]
        return None

    def _has_path(self, from_index: int, to_index: int) -> bool:
        """Breadth-first reachability check; a node reaches itself."""
        if from_index == to_index:
            return True

        visited: set[int] = set()
        queue = deque([from_index])

        while queue:
            current = queue.popleft()
            if current == to_index:
                return True
            if current in visited:
                continue
            visited.add(current)
            queue.extend(n for n in self.adjacency_list[current] if n not in visited)

        return False

    def _cycle_tail(self, dependency: str, parent: str) -> list[str]:
        """Path ``dependency -> ... -> parent`` for a refused edge."""
        if dependency == parent:
            return [parent]
        path = self.find_path(dependency, parent)
        assert path is not None, (
            f"reachability reported {dependency} -> {parent} but no path was found"
        )
        return path

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, name: str) -> list[str]:
        """Resolve a profile's transitive dependencies in activation order.

        Performs a depth-first post-order walk. Every profile appears after
        all of its own dependencies, shared dependencies appear once, and
        ``name`` is last.

        Args:
            name: Profile to resolve

        Returns:
            Ordered list of profile names ending with ``name``

        Raises:
            ProfileNotFoundError: If a visited profile is not registered
            CircularDependencyError: If the walk re-enters a profile on the
                current path
        """
        visiting: list[str] = []
        resolved: set[str] = set()
        result: list[str] = []

        def dfs(current: str) -> None:
            if current not in self.indices:
                raise ProfileNotFoundError(current)

            visiting.append(current)
            for dependency in self.get_dependencies(current):
                if dependency in resolved:
                    continue
                if dependency in visiting:
                    cycle = visiting[visiting.index(dependency):] + [dependency]
                    raise CircularDependencyError(cycle)
                dfs(dependency)
            visiting.pop()

            if current not in resolved:
                resolved.add(current)
                result.append(current)

        dfs(name)
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize the graph for debugging/logging."""
        return {
            "nodes": self.names(),
            "edges": [
                {"from": self._label(parent), "to": self._label(dependency)}
                for parent, dependencies in self.adjacency_list.items()
                for dependency in dependencies
            ],
            "node_count": self.node_count,
            "edge_count": self.edge_count,
        }

    def _index_of(self, name: str) -> int:
        try:
            return self.indices[name]
        except KeyError:
            raise ProfileNotFoundError(name) from None

    def _edge_indices(self, parent: str, dependency: str) -> tuple[int, int]:
        parent_index = self._index_of(parent)
        if dependency not in self.indices:
            raise DependencyNotFoundError(parent, dependency)
        return parent_index, self.indices[dependency]

    def _label(self, index: int) -> str:
        name = self.slots[index]
        assert name is not None, f"edge points at removed slot {index}"
        return name
