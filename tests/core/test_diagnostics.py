"""Tests for stored-profile checks and automatic repair."""

import pytest

from envmanage.core.diagnostics import (
    CheckReport,
    check_profiles,
    fix_profiles,
    suggest_fixes,
)
from envmanage.core.errors import (
    CircularDependencyError,
    DependencyChainError,
    DependencyNotFoundError,
    InvalidProfileNameError,
    MultipleErrors,
    ProfileNotFoundError,
    ProfileParseError,
)
from envmanage.core.loader import LazyLoader

from tests.core.conftest import make_profile, make_store


class TestCheckProfiles:
    """Test reporting of stored-profile problems."""

    def test_clean_store(self, layered_profiles) -> None:
        report = check_profiles(make_store(layered_profiles))

        assert report.ok
        assert report.checked == sorted(layered_profiles)

    def test_empty_store(self) -> None:
        report = check_profiles(make_store({}))

        assert report == CheckReport()
        assert report.ok

    def test_missing_dependency(self) -> None:
        report = check_profiles(make_store({"work": make_profile("base")}))

        assert not report.ok
        assert len(report.issues) == 1
        assert str(report.issues[0]) == "Trace: work -> Profile 'base' not found."

    def test_invalid_name(self) -> None:
        report = check_profiles(make_store({"1bad": make_profile()}))

        assert [type(e) for e in report.issues] == [InvalidProfileNameError]

    def test_aggregates_are_flattened(self) -> None:
        report = check_profiles(make_store({"p": make_profile("x", "y")}))

        assert len(report.issues) == 2
        assert not any(isinstance(e, MultipleErrors) for e in report.issues)

    def test_cycle(self) -> None:
        report = check_profiles(make_store({
            "a": make_profile("b"),
            "b": make_profile("a"),
        }))

        assert [e.profile for e in report.issues] == ["a", "b"]
        assert all(isinstance(e.root_cause, CircularDependencyError) for e in report.issues)

    def test_every_cycle_member_reported(self) -> None:
        report = check_profiles(make_store({
            "a": make_profile("b", "c"),
            "b": make_profile("c"),
            "c": make_profile("a"),
        }))

        assert {e.profile for e in report.issues} == {"a", "b", "c"}

    def test_json_store(self, json_store) -> None:
        json_store.write_profile("base", make_profile())
        json_store.write_profile("work", make_profile("base", "gone"))

        report = check_profiles(json_store)

        assert report.checked == ["base", "work"]
        assert len(report.issues) == 1


class TestSuggestFixes:
    """Test mapping errors to removable declarations."""

    def test_missing_dependency(self) -> None:
        err = DependencyChainError("work", ProfileNotFoundError("base"))

        assert suggest_fixes(err) == [("work", "base")]

    def test_nested_missing_dependency(self) -> None:
        err = DependencyChainError("a", DependencyChainError("b", ProfileNotFoundError("x")))

        assert suggest_fixes(err) == [("b", "x")]

    def test_dependency_not_found(self) -> None:
        assert suggest_fixes(DependencyNotFoundError("p", "d")) == [("p", "d")]

    def test_cycle_removes_closing_edge(self) -> None:
        err = DependencyChainError("a", CircularDependencyError(["a", "b", "a"]))

        assert suggest_fixes(err) == [("b", "a")]

    def test_multiple_deduplicated(self) -> None:
        err = MultipleErrors([
            DependencyChainError("p", ProfileNotFoundError("x")),
            DependencyChainError("p", ProfileNotFoundError("x")),
            DependencyChainError("p", ProfileNotFoundError("y")),
        ])

        assert suggest_fixes(err) == [("p", "x"), ("p", "y")]

    @pytest.mark.parametrize("err", [
        ProfileNotFoundError("top"),
        ProfileParseError("p", ValueError("bad")),
        CircularDependencyError(["a"]),
    ])
    def test_nothing_to_suggest(self, err) -> None:
        assert suggest_fixes(err) == []


class TestFixProfiles:
    """Test automatic repair."""

    def test_removes_missing_references(self) -> None:
        store = make_store({
            "base": make_profile(),
            "work": make_profile("base", "gone"),
        })

        applied = fix_profiles(store)

        assert applied == [("work", "gone")]
        assert store.read_profile("work").profiles == ["base"]
        assert check_profiles(store).ok

    def test_breaks_cycles(self) -> None:
        store = make_store({
            "a": make_profile("b"),
            "b": make_profile("c"),
            "c": make_profile("a"),
        })

        applied = fix_profiles(store)

        assert len(applied) >= 1
        assert check_profiles(store).ok
        assert LazyLoader(store).load_all() == []

    def test_self_dependency(self) -> None:
        store = make_store({"a": make_profile("a", A="1")})

        assert fix_profiles(store) == [("a", "a")]
        assert store.read_profile("a").profiles == []

    def test_clean_store_untouched(self, layered_profiles) -> None:
        store = make_store(layered_profiles)

        assert fix_profiles(store) == []
        assert store.read_profile("app").profiles == ["web", "db"]

    def test_unfixable_errors_terminate(self) -> None:
        store = make_store({"1bad": make_profile()})

        assert fix_profiles(store) == []

    def test_json_store(self, json_store) -> None:
        json_store.write_profile("work", make_profile("missing", EDITOR="code"))

        assert fix_profiles(json_store) == [("work", "missing")]
        assert json_store.read_profile("work").variables == {"EDITOR": "code"}

    def test_invalid_stored_name_is_skipped(self) -> None:
        store = make_store({"1bad": make_profile("missing")})

        assert fix_profiles(store) == []
        assert store.read_profile("1bad").profiles == ["missing"]
