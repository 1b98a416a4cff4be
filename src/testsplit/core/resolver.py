"""Merging observed durations into the test inventory."""

from typing import Mapping, TypeVar

K = TypeVar("K")
V = TypeVar("V")


def resolve_weights(base: Mapping[K, V], overrides: Mapping[K, V]) -> dict[K, V]:
    """Overlay observed durations onto the inventory without adding keys.

    A key present in both mappings takes the override value. Override keys
    absent from ``base`` are dropped, since they refer to tests that were
    renamed or deleted since the run that produced them.

    Args:
        base: Inventory mapping of identifier to default weight
        overrides: Historical mapping of identifier to observed weight

    Returns:
        New mapping with exactly the keys of ``base``
    """
    resolved = dict(base)
    for key, value in overrides.items():
        if key in resolved:
            resolved[key] = value
    return resolved
