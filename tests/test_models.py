"""Tests for the core data models."""

from testsplit.core.models import Partition, WorkItem


class TestWorkItem:
    """Tests for WorkItem."""

    def test_default_weight(self):
        assert WorkItem(identifier="a.js").weight == 0

    def test_to_dict(self):
        assert WorkItem("a.js", 120).to_dict() == {"identifier": "a.js", "weight": 120}

    def test_from_mapping_keeps_order(self):
        """Test items follow the mapping's key order."""
        items = WorkItem.from_mapping({"b.js": 2, "a.js": 1})
        assert items == [WorkItem("b.js", 2), WorkItem("a.js", 1)]

    def test_hashable(self):
        """Test items can be collected into sets."""
        assert len({WorkItem("a.js", 1), WorkItem("a.js", 1)}) == 1


class TestPartition:
    """Tests for Partition."""

    def test_empty(self):
        partition = Partition()
        assert len(partition) == 0
        assert partition.totals == []
        assert partition.makespan == 0

    def test_totals_and_makespan(self):
        partition = Partition(
            buckets=[
                [WorkItem("a.js", 5), WorkItem("b.js", 4), WorkItem("c.js", 2)],
                [WorkItem("d.js", 8), WorkItem("e.js", 2)],
            ]
        )

        assert partition.totals == [11, 10]
        assert partition.makespan == 11
        assert partition.identifiers == [{"a.js", "b.js", "c.js"}, {"d.js", "e.js"}]
        assert partition[1][0].identifier == "d.js"

    def test_to_dict(self):
        partition = Partition(buckets=[[WorkItem("a.js", 5)]])

        d = partition.to_dict()

        assert d["buckets"] == [[{"identifier": "a.js", "weight": 5}]]
        assert d["totals"] == [5]
        assert d["makespan"] == 5
