"""Sources of historical test durations."""

from testsplit.timing.base import TimingSource, get_timing_source
from testsplit.timing.console import ConsoleTimingSource
from testsplit.timing.json_report import JsonReportTimingSource

__all__ = [
    "TimingSource",
    "ConsoleTimingSource",
    "JsonReportTimingSource",
    "get_timing_source",
]
