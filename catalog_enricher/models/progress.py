"""Pydantic model for job progress snapshots."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ProgressSnapshot(BaseModel):
    """Point-in-time view of a resolution run.

    Counters are monotonic within a run and satisfy
    ``success_count + fail_count <= completed <= total``.

    Attributes:
        total: Records in the job
        completed: Records fully processed and merged
        success_count: Records counted as successes
        fail_count: Records counted as failures
        current_item: Description of an item near the head of the queue.
            Best-effort under concurrency: it can name a record that no
            worker is processing at that instant. Display only.
    """

    total: int = Field(default=0, ge=0)
    completed: int = Field(default=0, ge=0)
    success_count: int = Field(default=0, ge=0)
    fail_count: int = Field(default=0, ge=0)
    current_item: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def percent(self) -> int:
        """Completion percentage (0-100), 0 when there is nothing to do."""
        if self.total <= 0:
            return 0
        return (self.completed * 100) // self.total

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_finished(self) -> bool:
        return self.completed >= self.total
