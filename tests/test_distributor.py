"""Tests for distributing buckets onto the filesystem."""

from pathlib import Path

import pytest

from testsplit.core.models import WorkItem
from testsplit.distributor import FileDistributor, get_distributor


@pytest.fixture
def input_root(tmp_path):
    root = tmp_path / "tests"
    for relative in ["a.js", "b.js", "nested/c.js"]:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(relative)
    return root


@pytest.fixture
def paths():
    return {"a.js": Path("a.js"), "b.js": Path("b.js"), "c.js": Path("nested/c.js")}


def items(*names):
    return [WorkItem(identifier=name, weight=1) for name in names]


class TestCopy:
    """Tests for copy mode."""

    def test_copies_into_indexed_directory(self, tmp_path, input_root, paths):
        """Test bucket files land in output/<index>/<name>."""
        distributor = FileDistributor(input_root, paths)
        output = tmp_path / "out"

        distributor.copy(0, items("a.js", "c.js"), output)
        distributor.copy(1, items("b.js"), output)

        assert (output / "0" / "a.js").read_text() == "a.js"
        assert (output / "0" / "c.js").read_text() == "nested/c.js"
        assert (output / "1" / "b.js").read_text() == "b.js"
        assert not (output / "1" / "a.js").exists()
        assert len(distributor.report.copied) == 3
        assert distributor.report.success

    def test_missing_source_recorded_and_continues(self, tmp_path, input_root, paths):
        """Test a vanished file is reported without stopping the copy."""
        (input_root / "a.js").unlink()
        distributor = FileDistributor(input_root, paths)
        output = tmp_path / "out"

        distributor.copy(0, items("a.js", "b.js"), output)

        assert (output / "0" / "b.js").exists()
        assert not distributor.report.success
        failure = distributor.report.failures[0]
        assert failure.action == "copy"
        assert failure.path.endswith("a.js")


class TestDelete:
    """Tests for delete mode."""

    def test_deletes_files_outside_bucket(self, input_root, paths):
        """Test only the bucket's files remain."""
        distributor = FileDistributor(input_root, paths)

        distributor.delete(0, items("c.js"))

        assert not (input_root / "a.js").exists()
        assert not (input_root / "b.js").exists()
        assert (input_root / "nested" / "c.js").exists()
        assert len(distributor.report.deleted) == 2

    def test_already_deleted_is_not_failure(self, input_root, paths):
        """Test files that are already gone count as deleted."""
        (input_root / "a.js").unlink()
        distributor = FileDistributor(input_root, paths)

        distributor.delete(0, items("b.js"))

        assert distributor.report.success
        assert not (input_root / "nested" / "c.js").exists()

    def test_empty_bucket_deletes_everything(self, input_root, paths):
        """Test an empty keep set removes every inventory file."""
        distributor = FileDistributor(input_root, paths)

        distributor.delete(3, [])

        assert not any(p.is_file() for p in input_root.rglob("*"))

    def test_unknown_files_untouched(self, input_root, paths):
        """Test files that were not inventoried are left alone."""
        (input_root / "notes.txt").write_text("keep me")
        distributor = FileDistributor(input_root, paths)

        distributor.delete(0, items("a.js"))

        assert (input_root / "notes.txt").exists()


class TestGetDistributor:
    """Tests for get_distributor."""

    def test_copy_defaults_to_input_root(self, input_root, paths):
        """Test copy mode without an output writes beside the input files."""
        distribute = get_distributor("copy", FileDistributor(input_root, paths))

        distribute(0, items("a.js"))

        assert (input_root / "0" / "a.js").exists()

    def test_copy_with_output(self, tmp_path, input_root, paths):
        distribute = get_distributor("COPY", FileDistributor(input_root, paths), tmp_path / "out")

        distribute(2, items("b.js"))

        assert (tmp_path / "out" / "2" / "b.js").exists()

    def test_delete(self, input_root, paths):
        distribute = get_distributor("delete", FileDistributor(input_root, paths))

        distribute(0, items("a.js", "b.js"))

        assert not (input_root / "nested" / "c.js").exists()

    def test_unknown_mode(self, input_root, paths):
        with pytest.raises(ValueError, match="Unknown distribution mode"):
            get_distributor("move", FileDistributor(input_root, paths))
