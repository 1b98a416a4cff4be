"""Greedy balanced multiway partitioning (longest processing time first).

Items are sorted by weight, heaviest first. The first ``n`` items seed one
bucket each; every remaining item goes to the bucket with the smallest
running total. Among buckets with equal totals the one filled most
recently wins, and buckets that were never filled rank in seed order.

The result is within ``4/3 - 1/(3n)`` of the optimal makespan.
"""

import heapq
from typing import Callable, Iterable, TypeVar

T = TypeVar("T")


class InvalidBucketCountError(ValueError):
    """Raised when the requested bucket count is not a positive integer."""

    pass


def partition_into(
    key: Callable[[T], float],
    n: int,
    items: Iterable[T],
) -> list[list[T]]:
    """Split items into at most ``n`` buckets of roughly equal total weight.

    Args:
        key: Function extracting a nonnegative weight from an item
        n: Target bucket count, must be at least 1
        items: Items to distribute

    Returns:
        List of buckets. Fewer than ``n`` buckets are returned when there
        are fewer than ``n`` items; no bucket is ever empty.

    Raises:
        InvalidBucketCountError: If ``n`` is less than 1
        ValueError: If any item has a negative weight
    """
    if isinstance(n, bool) or not isinstance(n, int) or n < 1:
        raise InvalidBucketCountError(f"Bucket count must be a positive integer, got {n!r}")

    weighted = [(key(item), item) for item in items]
    for weight, item in weighted:
        if weight < 0:
            raise ValueError(f"Negative weight {weight!r} for item {item!r}")

    # sorted() is stable, so equal weights keep their input order
    ordered = sorted(weighted, key=lambda pair: pair[0], reverse=True)

    seeds = ordered[:n]
    buckets = [[item] for _, item in seeds]
    totals = [weight for weight, _ in seeds]

    # Heap entries are (total, rank, bucket index). Lower rank wins ties:
    # seeds rank by position, each fill gets a fresh, smaller rank.
    ranks = list(range(len(buckets)))
    heap = [(totals[i], ranks[i], i) for i in range(len(buckets))]
    heapq.heapify(heap)

    last_filled = None
    for step, (weight, item) in enumerate(ordered[n:], start=1):
        total, _, index = heapq.heappop(heap)
        buckets[index].append(item)
        totals[index] = total + weight
        ranks[index] = -step
        heapq.heappush(heap, (totals[index], ranks[index], index))
        last_filled = index

    if last_filled is None:
        return buckets

    rest = sorted(
        (i for i in range(len(buckets)) if i != last_filled),
        key=lambda i: (totals[i], ranks[i]),
    )
    return [buckets[last_filled]] + [buckets[i] for i in rest]


def makespan(buckets: list[list[T]], key: Callable[[T], float]) -> float:
    """Return the largest bucket total, or 0 when there are no buckets."""
    return max((sum(key(item) for item in bucket) for bucket in buckets), default=0)
