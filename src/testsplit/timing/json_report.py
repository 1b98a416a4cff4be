"""Reading test durations from structured JSON reports."""

import json
import logging
from collections import defaultdict
from typing import Any, Iterator

from testsplit.timing.base import TimingSource

logger = logging.getLogger(__name__)


class JsonReportTimingSource(TimingSource):
    """Parses durations from pytest-json-report style documents.

    Each document holds a ``tests`` list whose entries carry a ``nodeid``
    (``path/to/test_file.py::test_name``) and a ``duration`` in seconds.
    Per-test durations are summed per file. When ``duration`` is absent the
    setup, call and teardown phase durations are summed instead.

    The input may hold several concatenated documents, one per artifact.
    """

    PHASES = ("setup", "call", "teardown")

    def parse(self, text: str) -> dict[str, int]:
        seconds: dict[str, float] = defaultdict(float)

        for document in self._documents(text):
            tests = document.get("tests", []) if isinstance(document, dict) else []
            for test in tests:
                entry = self._parse_test(test)
                if entry is None:
                    continue
                name, duration = entry
                seconds[name] += duration

        durations = {name: int(round(total * 1000)) for name, total in seconds.items()}
        logger.debug("Parsed %d durations from JSON report", len(durations))
        return durations

    def _parse_test(self, test: Any) -> tuple[str, float] | None:
        """Extract (file name, seconds) from one test entry, or None if malformed."""
        if not isinstance(test, dict):
            logger.warning("Skipping malformed test entry: %r", test)
            return None

        nodeid = str(test.get("nodeid") or "")
        file_path = nodeid.split("::")[0]
        if not file_path:
            logger.warning("Skipping test entry without nodeid")
            return None
        name = file_path.replace("\\", "/").rsplit("/", 1)[-1]

        duration = test.get("duration")
        if duration is None:
            phases = [test.get(phase) for phase in self.PHASES]
            parts = [phase.get("duration", 0) for phase in phases if isinstance(phase, dict)]
            if not all(_is_duration(part) for part in parts):
                logger.warning("Skipping %s: malformed phase durations", nodeid)
                return None
            duration = sum(parts)

        if not _is_duration(duration):
            logger.warning("Skipping %s: malformed duration %r", nodeid, duration)
            return None

        return name, float(duration)

    def _documents(self, text: str) -> Iterator[Any]:
        """Yield every JSON document in a blob of concatenated documents."""
        decoder = json.JSONDecoder()
        position = 0
        length = len(text)

        while position < length:
            while position < length and text[position].isspace():
                position += 1
            if position >= length:
                break
            try:
                document, position = decoder.raw_decode(text, position)
            except json.JSONDecodeError as e:
                logger.warning("Ignoring unparseable report content: %s", e)
                return
            yield document


def _is_duration(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0
