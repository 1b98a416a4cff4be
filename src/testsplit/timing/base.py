"""Base timing source interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional


class TimingSource(ABC):
    """Abstract base class for historical timing parsers."""

    @abstractmethod
    def parse(self, text: str) -> dict[str, int]:
        """Extract observed durations from a previous run's output.

        Args:
            text: Raw artifact content, possibly empty

        Returns:
            Mapping of test file name to duration in milliseconds. Empty
            or unrecognised input gives an empty mapping.
        """
        pass


def get_timing_source(
    name: str,
    extensions: Optional[Iterable[str]] = None,
) -> TimingSource:
    """Create a timing source by name ("console" or "json")."""
    from testsplit.timing.console import ConsoleTimingSource
    from testsplit.timing.json_report import JsonReportTimingSource

    name = name.lower()
    if name == "console":
        if extensions is not None:
            return ConsoleTimingSource(extensions=extensions)
        return ConsoleTimingSource()
    if name == "json":
        return JsonReportTimingSource()
    raise ValueError(f"Unknown timing source: {name}")
