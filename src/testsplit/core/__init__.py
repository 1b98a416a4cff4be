"""Core weighting and partitioning functionality."""

from testsplit.core.inventory import FileInventory
from testsplit.core.models import Partition, WorkItem
from testsplit.core.partitioner import InvalidBucketCountError, partition_into
from testsplit.core.resolver import resolve_weights

__all__ = [
    "FileInventory",
    "InvalidBucketCountError",
    "Partition",
    "WorkItem",
    "partition_into",
    "resolve_weights",
]
