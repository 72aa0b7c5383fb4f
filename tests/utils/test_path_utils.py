"""
Tests for path_utils module.

Tests cover path normalization, directory creation and the mapping
between profile names and record files.
"""

import pytest
from pathlib import Path

from envmanage.utils.path_utils import (
    PROFILE_EXTENSION,
    normalize_path,
    ensure_directory,
    profile_file_path,
    scan_profile_names,
)


class TestPathNormalization:
    """Test path normalization."""

    @pytest.mark.parametrize("raw", ["profiles", Path("profiles"), "./profiles"])
    def test_returns_absolute_path(self, raw):
        result = normalize_path(raw)

        assert isinstance(result, Path)
        assert result.is_absolute()

    def test_expands_home_directory(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))

        result = normalize_path("~/.config/env-manage")

        assert "~" not in str(result)
        assert result == tmp_path.resolve() / ".config" / "env-manage"

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_rejects_empty(self, raw):
        with pytest.raises(ValueError, match="Path cannot be None or empty"):
            normalize_path(raw)


class TestDirectoryOperations:
    """Test directory creation."""

    def test_ensure_directory_creates_nested(self, tmp_path):
        nested = tmp_path / "env-manage" / "profiles"

        result = ensure_directory(nested)

        assert result == nested
        assert nested.is_dir()

    def test_ensure_directory_existing(self, tmp_path):
        assert ensure_directory(tmp_path) == tmp_path


class TestProfileFiles:
    """Test mapping profile names to record files."""

    def test_profile_file_path(self, tmp_path):
        assert profile_file_path(tmp_path, "work") == tmp_path / "work.json"
        assert PROFILE_EXTENSION == ".json"

    def test_scan_missing_directory(self, tmp_path):
        assert scan_profile_names(tmp_path / "profiles") == []

    def test_scan_lists_sorted_stems(self, tmp_path):
        for name in ("work", "base", "node-18"):
            profile_file_path(tmp_path, name).write_text("{}", encoding="utf-8")

        assert scan_profile_names(tmp_path) == ["base", "node-18", "work"]

    def test_scan_skips_other_entries(self, tmp_path):
        (tmp_path / "base.json").write_text("{}", encoding="utf-8")
        (tmp_path / "README.md").write_text("", encoding="utf-8")
        (tmp_path / "backup.json.bak").write_text("", encoding="utf-8")
        (tmp_path / "archive.json").mkdir()

        assert scan_profile_names(tmp_path) == ["base"]
