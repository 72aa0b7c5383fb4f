"""Exception hierarchy for profile dependency handling.

Every error raised by the graph, the loader and the collector derives from
:class:`DependencyError` and carries a human-readable ``message`` which is
also its ``str()``. Two errors wrap others:

- :class:`DependencyChainError` adds one breadcrumb of context ("profile X
  failed because of its dependency") and nests arbitrarily deep. It renders
  as ``Trace: a -> b -> <root cause>``.
- :class:`MultipleErrors` aggregates independent failures from sibling
  dependencies and renders one line per member.

Example:
    >>> err = DependencyChainError("work", ProfileNotFoundError("base"))
    >>> str(err)
    "Trace: work -> Profile 'base' not found."
"""

from __future__ import annotations


class DependencyError(Exception):
    """Base class for all profile dependency errors.

    Attributes:
        message: Human-readable description of the failure
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class CircularDependencyError(DependencyError):
    """Raised when a dependency cycle is detected or would be created.

    Attributes:
        cycle: Profile names forming the cycle, first and last entries equal
            when the cycle is fully reconstructed

    Example:
        >>> raise CircularDependencyError(["a", "b", "a"])
    """

    def __init__(self, cycle: list[str]):
        self.cycle = list(cycle)
        super().__init__(f"Circular dependency detected: {' -> '.join(self.cycle)}")


class ProfileNotFoundError(DependencyError):
    """Raised when a profile is neither registered nor stored."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Profile '{name}' not found.")


class DependencyNotFoundError(DependencyError):
    """Raised when a profile references a dependency that does not exist.

    Attributes:
        parent: Profile declaring the dependency
        dependency: The missing dependency name
    """

    def __init__(self, parent: str, dependency: str):
        self.parent = parent
        self.dependency = dependency
        super().__init__(
            f"Profile '{parent}' references non-existent profile '{dependency}'."
        )


class ProfileIOError(DependencyError):
    """Raised when a stored profile record cannot be read or written."""

    def __init__(self, name: str, cause: Exception):
        self.name = name
        self.cause = cause
        super().__init__(f"Failed to read profile '{name}': {cause}")


class ProfileParseError(DependencyError):
    """Raised when a stored profile record is malformed."""

    def __init__(self, name: str, cause: Exception):
        self.name = name
        self.cause = cause
        super().__init__(f"Failed to parse profile '{name}': {cause}")


class InvalidProfileNameError(DependencyError):
    """Raised when a profile name is not a valid identifier."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid profile name '{name}': {reason}")


class MultipleErrors(DependencyError):
    """Flat aggregate of independent failures.

    Attributes:
        errors: The member errors, in the order they occurred
    """

    def __init__(self, errors: list[DependencyError]):
        self.errors = list(errors)
        super().__init__("\n".join(str(err) for err in self.errors))

    def __iter__(self):
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)


class DependencyChainError(DependencyError):
    """Context wrapper: ``profile`` failed because of ``cause``.

    Chains nest, one level per profile on the path from the requested
    profile down to the one that actually failed.

    Attributes:
        profile: Profile whose dependency failed
        cause: The wrapped error
    """

    def __init__(self, profile: str, cause: DependencyError):
        self.profile = profile
        self.cause = cause
        super().__init__(self._render())

    @property
    def trace(self) -> list[str]:
        """Profile names from the outermost wrapper to the innermost one."""
        names = [self.profile]
        err = self.cause
        while isinstance(err, DependencyChainError):
            names.append(err.profile)
            err = err.cause
        return names

    @property
    def root_cause(self) -> DependencyError:
        """The first non-chain error found by unwinding ``cause``."""
        err = self.cause
        while isinstance(err, DependencyChainError):
            err = err.cause
        return err

    def _render(self) -> str:
        return f"Trace: {' -> '.join(self.trace)} -> {self.root_cause}"
