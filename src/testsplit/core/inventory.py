"""Test file inventory."""

import logging
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MS = 10000


class FileInventory:
    """Lists test files under a root directory and assigns default weights.

    Files are identified by base name only. When two files in different
    directories share a name, the one visited last (in sorted path order)
    wins and a warning is logged.
    """

    def __init__(
        self,
        root: Path | str,
        default_duration_ms: int = DEFAULT_DURATION_MS,
        extensions: Optional[Iterable[str]] = None,
    ):
        """Initialize the inventory.

        Args:
            root: Directory to scan recursively
            default_duration_ms: Weight given to every file before history is applied
            extensions: Optional file suffixes to keep (e.g. [".js"]); all files if None
        """
        self.root = Path(root)
        self.default_duration_ms = default_duration_ms
        self.extensions = tuple(extensions) if extensions else None
        self._paths: dict[str, Path] = {}

    def scan(self) -> dict[str, int]:
        """Scan the root and return a mapping of file name to default weight."""
        if not self.root.is_dir():
            raise FileNotFoundError(f"Test directory not found: {self.root}")

        paths: dict[str, Path] = {}
        for path in sorted(self.root.rglob("*")):
            if not path.is_file():
                continue
            if self.extensions and not path.name.endswith(self.extensions):
                continue

            relative = path.relative_to(self.root)
            if path.name in paths:
                logger.warning(
                    "Duplicate test file name %s: %s replaces %s",
                    path.name,
                    relative,
                    paths[path.name],
                )
            paths[path.name] = relative

        self._paths = paths
        logger.info("Found %d test files under %s", len(paths), self.root)
        return {name: self.default_duration_ms for name in paths}

    @property
    def paths(self) -> dict[str, Path]:
        """Paths relative to the root for the last scan, keyed by file name."""
        return dict(self._paths)

    def locate(self, identifier: str) -> Path:
        """Get the absolute path of a scanned file."""
        return self.root / self._paths[identifier]
