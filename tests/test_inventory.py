"""Tests for the test file inventory."""

import logging
from pathlib import Path

import pytest

from testsplit.core.inventory import DEFAULT_DURATION_MS, FileInventory


def make_files(root: Path, *names: str) -> None:
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"// {name}\n")


class TestFileInventory:
    """Tests for FileInventory."""

    def test_scan_flat_directory(self, tmp_path):
        """Test each file gets the default weight."""
        make_files(tmp_path, "login.js", "signup.js")

        inventory = FileInventory(tmp_path)

        assert inventory.scan() == {
            "login.js": DEFAULT_DURATION_MS,
            "signup.js": DEFAULT_DURATION_MS,
        }

    def test_scan_recursive_uses_base_names(self, tmp_path):
        """Test nested files are keyed by base name and directories are skipped."""
        make_files(tmp_path, "features1/a.js", "features2/deep/b.js", "c.js")
        (tmp_path / "empty").mkdir()

        weights = FileInventory(tmp_path, default_duration_ms=5).scan()

        assert weights == {"a.js": 5, "b.js": 5, "c.js": 5}

    def test_paths_relative_to_root(self, tmp_path):
        """Test the inventory remembers where each file lives."""
        make_files(tmp_path, "features1/a.js", "c.js")

        inventory = FileInventory(tmp_path)
        inventory.scan()

        assert inventory.paths == {
            "a.js": Path("features1/a.js"),
            "c.js": Path("c.js"),
        }
        assert inventory.locate("a.js") == tmp_path / "features1" / "a.js"

    def test_duplicate_names_last_sorted_wins(self, tmp_path, caplog):
        """Test base-name collisions keep the last file in sorted order."""
        make_files(tmp_path, "a/shared.js", "b/shared.js")

        inventory = FileInventory(tmp_path)
        with caplog.at_level(logging.WARNING):
            weights = inventory.scan()

        assert weights == {"shared.js": DEFAULT_DURATION_MS}
        assert inventory.paths["shared.js"] == Path("b/shared.js")
        assert "Duplicate test file name shared.js" in caplog.text

    def test_extension_filter(self, tmp_path):
        """Test only matching suffixes are kept when extensions are given."""
        make_files(tmp_path, "a.js", "b.ts", "README.md")

        weights = FileInventory(tmp_path, extensions=[".js", ".ts"]).scan()

        assert set(weights) == {"a.js", "b.ts"}

    def test_empty_directory(self, tmp_path):
        """Test an empty directory gives an empty inventory."""
        assert FileInventory(tmp_path).scan() == {}

    def test_missing_directory(self, tmp_path):
        """Test scanning a missing directory raises."""
        with pytest.raises(FileNotFoundError):
            FileInventory(tmp_path / "nope").scan()
