"""Progress counters for one resolution run.

All mutation happens synchronously on the event loop thread, so each
``finish`` call is atomic with respect to other records: ``completed`` and
the success/fail counter move together and no reader can observe one
without the other.
"""
from typing import Optional

from catalog_enricher.models.progress import ProgressSnapshot


class ProgressTracker:
    """Single-writer progress counters; ``snapshot`` never blocks."""

    def __init__(self, total: int):
        if total < 0:
            raise ValueError("total must be >= 0")
        self.total = total
        self.completed = 0
        self.success_count = 0
        self.fail_count = 0
        self.current_item: Optional[str] = None

    def start(self, item: Optional[str]) -> ProgressSnapshot:
        """Mark ``item`` as the record being worked on."""
        self.current_item = item
        return self.snapshot()

    def finish(self, success: bool, next_item: Optional[str] = None) -> ProgressSnapshot:
        """Count one processed record."""
        if self.completed >= self.total:
            raise ValueError("more records finished than the job contains")
        self.completed += 1
        if success:
            self.success_count += 1
        else:
            self.fail_count += 1
        self.current_item = next_item
        return self.snapshot()

    def close(self) -> ProgressSnapshot:
        """Final snapshot of the run; no current item."""
        self.current_item = None
        return self.snapshot()

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            total=self.total,
            completed=self.completed,
            success_count=self.success_count,
            fail_count=self.fail_count,
            current_item=self.current_item,
        )
