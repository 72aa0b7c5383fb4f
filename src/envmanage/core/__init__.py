"""Core profile dependency engine.

This package provides the profile data model, the dependency graph, lazy
loading from a profile store, variable collection, and diagnostics.

Classes:
    Profile: Variables plus inherited profile names
    DependencyGraph: Cycle-safe DAG over profile names
    ProfileSession: Loaded profiles and their graph
    LazyLoader: On-demand, fault-tolerant loader
    VariableCollector: Merges variables in resolution order
    InMemoryProfileStore / JsonProfileStore: ProfileStore implementations
    GlobalChange: Result of editing the global profile
    ManagerConfig: Paths and logging configuration
"""

from envmanage.core.collector import VariableCollector, parse_overrides
from envmanage.core.config import ManagerConfig, configure_logging, open_store
from envmanage.core.dependency_graph import DependencyGraph
from envmanage.core.diagnostics import CheckReport, check_profiles, fix_profiles, suggest_fixes
from envmanage.core.global_profile import (
    GlobalChange,
    add_global_items,
    clean_global,
    remove_global_items,
)
from envmanage.core.errors import (
    CircularDependencyError,
    DependencyChainError,
    DependencyError,
    DependencyNotFoundError,
    InvalidProfileNameError,
    MultipleErrors,
    ProfileIOError,
    ProfileNotFoundError,
    ProfileParseError,
)
from envmanage.core.loader import LazyLoader, ProfileSession
from envmanage.core.profile import Profile, validate_profile_name
from envmanage.core.profile_store import InMemoryProfileStore, JsonProfileStore, ProfileStore

__all__ = [
    "Profile",
    "validate_profile_name",
    "DependencyGraph",
    "ProfileSession",
    "LazyLoader",
    "VariableCollector",
    "parse_overrides",
    "ProfileStore",
    "InMemoryProfileStore",
    "JsonProfileStore",
    "ManagerConfig",
    "configure_logging",
    "open_store",
    "CheckReport",
    "check_profiles",
    "fix_profiles",
    "suggest_fixes",
    "GlobalChange",
    "add_global_items",
    "remove_global_items",
    "clean_global",
    "DependencyError",
    "CircularDependencyError",
    "ProfileNotFoundError",
    "DependencyNotFoundError",
    "ProfileIOError",
    "ProfileParseError",
    "DependencyChainError",
    "MultipleErrors",
    "InvalidProfileNameError",
]
