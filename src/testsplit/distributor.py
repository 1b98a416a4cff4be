"""Placing each bucket's test files where its worker will run them."""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional

from testsplit.core.models import WorkItem

logger = logging.getLogger(__name__)

Distribute = Callable[[int, list[WorkItem]], None]


@dataclass
class DistributionFailure:
    """A file that could not be copied or deleted."""

    path: str
    action: str
    error: str

    def to_dict(self) -> dict:
        return {"path": self.path, "action": self.action, "error": self.error}


@dataclass
class DistributionReport:
    """Outcome of distributing a partition."""

    copied: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    failures: list[DistributionFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True when every file operation succeeded."""
        return not self.failures

    def to_dict(self) -> dict:
        return {
            "copied": self.copied,
            "deleted": self.deleted,
            "failures": [f.to_dict() for f in self.failures],
        }


class FileDistributor:
    """Copies or deletes inventory files according to bucket contents.

    Failing files are logged and recorded in ``report``; distribution
    carries on with the remaining files.
    """

    def __init__(self, input_root: Path | str, paths: dict[str, Path]):
        """Initialize the distributor.

        Args:
            input_root: Directory the inventory was scanned from
            paths: Inventory file name to path relative to ``input_root``
        """
        self.input_root = Path(input_root)
        self.paths = paths
        self.report = DistributionReport()

    def copy(self, index: int, bucket: Iterable[WorkItem], output_root: Path | str) -> None:
        """Copy a bucket's files into ``output_root/<index>/``."""
        target_dir = Path(output_root) / str(index)

        for item in bucket:
            source = self._source(item.identifier)
            target = target_dir / item.identifier
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(source, target)
            except OSError as e:
                self._fail(source, "copy", e)
                continue
            self.report.copied.append(str(target))
            logger.debug("Copied %s to %s", source, target)

    def delete(self, index: int, bucket: Iterable[WorkItem]) -> None:
        """Delete every inventory file that is not part of the bucket.

        Files that are already gone count as deleted.
        """
        keep = {item.identifier for item in bucket}

        for identifier in self.paths:
            if identifier in keep:
                continue
            path = self._source(identifier)
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                self._fail(path, "delete", e)
                continue
            self.report.deleted.append(str(path))
            logger.debug("Deleted %s (not in bucket %d)", path, index)

    def _source(self, identifier: str) -> Path:
        return self.input_root / self.paths.get(identifier, Path(identifier))

    def _fail(self, path: Path, action: str, error: OSError) -> None:
        logger.error("Failed to %s %s: %s", action, path, error)
        self.report.failures.append(
            DistributionFailure(path=str(path), action=action, error=str(error))
        )


def get_distributor(
    mode: str,
    distributor: FileDistributor,
    output_root: Optional[Path | str] = None,
) -> Distribute:
    """Create the per-bucket callback for a distribution mode.

    Args:
        mode: "copy" or "delete"
        distributor: File distributor bound to the input directory
        output_root: Copy destination (defaults to the input directory)
    """
    mode = mode.lower()
    if mode == "copy":
        root = Path(output_root) if output_root else distributor.input_root
        return lambda index, bucket: distributor.copy(index, bucket, root)
    if mode == "delete":
        return distributor.delete
    raise ValueError(f"Unknown distribution mode: {mode}")
