"""Shared fixtures for profile engine tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from envmanage.core.dependency_graph import DependencyGraph
from envmanage.core.loader import LazyLoader
from envmanage.core.profile import Profile
from envmanage.core.profile_store import InMemoryProfileStore, JsonProfileStore


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------

def make_profile(*profiles: str, **variables: str) -> Profile:
    """Create a profile depending on ``profiles`` and setting ``variables``."""
    return Profile(variables=dict(variables), profiles=list(profiles))


def make_store(profiles: dict[str, Profile]) -> InMemoryProfileStore:
    """Create an in-memory store holding the given profiles."""
    return InMemoryProfileStore(profiles)


def force_edge(graph: DependencyGraph, parent: str, dependency: str) -> None:
    """Insert an edge without the cycle check, to corrupt a graph on purpose."""
    parent_index = graph.add_node(parent)
    dependency_index = graph.add_node(dependency)
    graph.adjacency_list[parent_index].append(dependency_index)
    graph.reverse_adjacency[dependency_index].append(parent_index)


def assert_topological_order(order: list[str], graph: DependencyGraph) -> None:
    """Verify that every profile comes after all of its dependencies."""
    position = {name: i for i, name in enumerate(order)}

    for name in order:
        for dependency in graph.get_dependencies(name):
            assert dependency in position, f"{dependency} missing from order"
            assert position[dependency] < position[name], (
                f"Dependency {dependency} should come before {name}"
            )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def base_work_profiles() -> dict[str, Profile]:
    """The base/work pair: work inherits base and overrides EDITOR."""
    return {
        "base": make_profile(EDITOR="vim", PAGER="less"),
        "work": make_profile("base", EDITOR="code"),
    }


@pytest.fixture
def layered_profiles() -> dict[str, Profile]:
    """A diamond: app -> (web, db) -> base, plus an isolated profile."""
    return {
        "base": make_profile(LANG="C", LEVEL="base"),
        "web": make_profile("base", PORT="8080", LEVEL="web"),
        "db": make_profile("base", DB_HOST="localhost", LEVEL="db"),
        "app": make_profile("web", "db", LEVEL="app"),
        "solo": make_profile(SOLO="1"),
    }


@pytest.fixture
def layered_graph(layered_profiles: dict[str, Profile]) -> DependencyGraph:
    return DependencyGraph.build(layered_profiles)


@pytest.fixture
def layered_loader(layered_profiles: dict[str, Profile]) -> LazyLoader:
    """Loader with every layered profile loaded."""
    loader = LazyLoader(make_store(layered_profiles))
    loader.load_all(strict=True)
    return loader


@pytest.fixture
def json_store(tmp_path: Path) -> JsonProfileStore:
    """Empty JSON store rooted in a temporary directory."""
    return JsonProfileStore(tmp_path / "env-manage")
