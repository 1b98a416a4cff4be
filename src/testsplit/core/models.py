"""Data models for weighted test files and partitions."""

from dataclasses import dataclass, field
from typing import Union

Weight = Union[int, float]


@dataclass(frozen=True)
class WorkItem:
    """A test file identified by its base name, with an estimated duration."""

    identifier: str
    weight: Weight = 0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"identifier": self.identifier, "weight": self.weight}

    @classmethod
    def from_mapping(cls, weights: dict[str, Weight]) -> list["WorkItem"]:
        """Create work items from an identifier to weight mapping."""
        return [cls(identifier=name, weight=weight) for name, weight in weights.items()]


@dataclass
class Partition:
    """An ordered sequence of buckets, one per worker.

    Bucket position carries no meaning beyond the ordering produced by the
    partitioner; only bucket contents and totals are significant.
    """

    buckets: list[list[WorkItem]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.buckets)

    def __iter__(self):
        return iter(self.buckets)

    def __getitem__(self, index: int) -> list[WorkItem]:
        return self.buckets[index]

    @property
    def totals(self) -> list[Weight]:
        """Total weight of each bucket, in bucket order."""
        return [sum(item.weight for item in bucket) for bucket in self.buckets]

    @property
    def makespan(self) -> Weight:
        """Largest bucket total, or 0 for an empty partition."""
        return max(self.totals, default=0)

    @property
    def identifiers(self) -> list[set[str]]:
        """Identifier set of each bucket."""
        return [{item.identifier for item in bucket} for bucket in self.buckets]

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "buckets": [[item.to_dict() for item in bucket] for bucket in self.buckets],
            "totals": self.totals,
            "makespan": self.makespan,
        }
