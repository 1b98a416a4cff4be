"""Scraping test durations from raw console output."""

import logging
import re
from typing import Iterable

from testsplit.timing.base import TimingSource

logger = logging.getLogger(__name__)


class ConsoleTimingSource(TimingSource):
    """Parses durations from mocha/nightwatch style console logs.

    A record is a parenthesised test file path followed, anywhere later,
    by a parenthesised duration such as ``(9043ms)``::

        User (/web/test/features1/registrationValidation5.js)
          ✓ while register with no password (9043ms)

    Records whose duration is not a whole number of milliseconds are
    skipped with a warning.
    """

    DEFAULT_EXTENSIONS = (".js",)

    def __init__(self, extensions: Iterable[str] = DEFAULT_EXTENSIONS):
        self.extensions = tuple(extensions)
        if not self.extensions or not all(self.extensions):
            raise ValueError("At least one non-empty test file extension is required")
        suffixes = "|".join(re.escape(ext) for ext in self.extensions)
        self.pattern = re.compile(
            rf"\(([^()\r\n]+?(?:{suffixes}))\).+?\(([^()\s]+?)ms\)",
            re.DOTALL,
        )

    def parse(self, text: str) -> dict[str, int]:
        durations: dict[str, int] = {}

        for match in self.pattern.finditer(text):
            path, token = match.group(1), match.group(2)
            name = path.rsplit("/", 1)[-1]

            if not (token.isascii() and token.isdigit()):
                logger.warning("Skipping %s: malformed duration %r", name, token)
                continue

            durations[name] = int(token)

        logger.debug("Parsed %d durations from console output", len(durations))
        return durations
