"""Split orchestration: inventory, history, weighting, partitioning, distribution."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

from testsplit.config import TestSplitConfig
from testsplit.core.inventory import FileInventory
from testsplit.core.models import Partition, WorkItem
from testsplit.core.partitioner import partition_into
from testsplit.core.resolver import resolve_weights
from testsplit.distributor import DistributionReport, FileDistributor, get_distributor
from testsplit.timing.base import TimingSource, get_timing_source

logger = logging.getLogger(__name__)


class HistoryProvider(Protocol):
    """Anything that can return a previous run's raw timing output."""

    def fetch_history(self) -> str: ...


@dataclass
class PipelineResult:
    """Outcome of a split run."""

    partition: Partition
    weights: dict[str, int] = field(default_factory=dict)
    history_matched: int = 0
    report: DistributionReport = field(default_factory=DistributionReport)

    @property
    def success(self) -> bool:
        return self.report.success


class SplitPipeline:
    """Wires the inventory, timing history and partitioner together."""

    def __init__(
        self,
        config: TestSplitConfig,
        provider: Optional[HistoryProvider] = None,
        timing_source: Optional[TimingSource] = None,
    ):
        """Initialize the pipeline.

        Args:
            config: TestSplit configuration
            provider: Source of previous run output (defaults to CircleCI artifacts)
            timing_source: Parser for that output (defaults to config.timing.source)
        """
        self.config = config
        self.provider = provider
        self.timing_source = timing_source or get_timing_source(
            config.timing.source, config.timing.extensions
        )
        self.inventory: Optional[FileInventory] = None
        self.history_matched = 0

    def fetch_history(self) -> str:
        """Return previous run output, or "" when a single node needs no balancing."""
        if self.config.split.node_total <= 1:
            return ""

        provider = self.provider
        if provider is None:
            from testsplit.ci.artifacts import CircleCIArtifactProvider

            provider = CircleCIArtifactProvider(self.config.circleci)
        return provider.fetch_history()

    def resolve(self, input_root: Path | str) -> dict[str, int]:
        """Build the inventory and overlay historical durations onto it."""
        self.inventory = FileInventory(
            input_root,
            default_duration_ms=self.config.timing.default_duration_ms,
        )
        defaults = self.inventory.scan()

        history = self.timing_source.parse(self.fetch_history())
        weights = resolve_weights(defaults, history)

        matched = sum(1 for name in history if name in defaults)
        self.history_matched = matched
        logger.info(
            "Using %d historical durations (%d stale ignored)",
            matched,
            len(history) - matched,
        )
        return weights

    def plan(self, input_root: Path | str) -> Partition:
        """Compute the partition without touching any files."""
        weights = self.resolve(input_root)
        return self._partition(weights)

    def run(
        self,
        input_root: Path | str,
        output_root: Optional[Path | str] = None,
        node_index: Optional[int] = None,
    ) -> PipelineResult:
        """Compute the partition and distribute it.

        Args:
            input_root: Directory containing the test files
            output_root: Copy destination (copy mode only, defaults to input_root)
            node_index: Only distribute this bucket; all buckets if None
        """
        weights = self.resolve(input_root)
        partition = self._partition(weights)

        distributor = FileDistributor(input_root, self.inventory.paths)
        distribute = get_distributor(self.config.split.mode, distributor, output_root)

        for index, bucket in enumerate(partition):
            if node_index is not None and index != node_index:
                continue
            distribute(index, bucket)

        if node_index is not None and node_index >= len(partition):
            logger.warning(
                "Node index %d has no bucket (%d buckets)", node_index, len(partition)
            )
            if self.config.split.mode == "delete":
                distribute(node_index, [])

        return PipelineResult(
            partition=partition,
            weights=weights,
            history_matched=self.history_matched,
            report=distributor.report,
        )

    def _partition(self, weights: dict[str, int]) -> Partition:
        items = WorkItem.from_mapping(weights)
        buckets = partition_into(lambda item: item.weight, self.config.split.node_total, items)
        partition = Partition(buckets=buckets)
        logger.info(
            "Split %d tests into %d buckets (makespan %sms)",
            len(items),
            len(partition),
            partition.makespan,
        )
        for index, (bucket, total) in enumerate(zip(partition, partition.totals)):
            logger.debug(
                "Bucket %d (%sms): %s",
                index,
                total,
                ", ".join(item.identifier for item in bucket),
            )
        return partition
