"""
Job state management.

In-memory registry of enrichment jobs. A job is created from imported
records (usable as a preview before resolution), resolved in the background,
and read back for export once finished. Jobs live as long as the process.
"""
import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

import structlog

from catalog_enricher.errors.exceptions import JobNotFoundError
from catalog_enricher.models.progress import ProgressSnapshot
from catalog_enricher.models.record import ToolRecord
from catalog_enricher.services.cancellation import CancellationToken
from catalog_enricher.services.orchestrator import ProgressSink, ResolutionOrchestrator
from catalog_enricher.services.progress import ProgressTracker

logger = structlog.get_logger(__name__)


@dataclass
class Job:
    """One enrichment job and its runtime handles."""
    job_id: str
    records: List[ToolRecord]
    tracker: ProgressTracker
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    token: CancellationToken = field(default_factory=CancellationToken)
    task: Optional["asyncio.Task[ProgressSnapshot]"] = None

    @property
    def is_running(self) -> bool:
        return self.task is not None and not self.task.done()


class JobStore:
    """
    Registry of jobs keyed by id.

    Usage:
        store = JobStore(orchestrator)
        job_id = store.create_job(records)
        task = store.start_resolution(job_id, sink=print)
        await task
        records = store.get_records(job_id)
    """

    def __init__(self, orchestrator: ResolutionOrchestrator):
        self.orchestrator = orchestrator
        self._jobs: Dict[str, Job] = {}

    def create_job(self, records: List[ToolRecord]) -> str:
        job_id = uuid.uuid4().hex
        self._jobs[job_id] = Job(
            job_id=job_id,
            records=list(records),
            tracker=ProgressTracker(len(records)),
        )
        logger.info("job_created", job_id=job_id, total=len(records))
        return job_id

    def get_job(self, job_id: str) -> Job:
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(f"Job {job_id} not found")
        return job

    def start_resolution(
        self, job_id: str, sink: Optional[ProgressSink] = None
    ) -> "asyncio.Task[ProgressSnapshot]":
        """Run the job in the background; returns immediately.

        Raises:
            JobNotFoundError: Unknown job id
            RuntimeError: Job is running or has already run
        """
        job = self.get_job(job_id)
        if job.is_running:
            raise RuntimeError(f"Job {job_id} is already running")
        # Progress counters belong to a single run
        if job.task is not None or job.tracker.completed > 0:
            raise RuntimeError(f"Job {job_id} has already been resolved; create a new job")

        job.task = asyncio.create_task(
            self.orchestrator.run(job.records, job.tracker, sink, job.token),
            name=f"enrich-{job_id}",
        )
        job.task.add_done_callback(lambda t: self._on_done(job_id, t))
        logger.info("job_started", job_id=job_id)
        return job.task

    def _on_done(self, job_id: str, task: "asyncio.Task[ProgressSnapshot]") -> None:
        if task.cancelled():
            logger.warning("job_task_cancelled", job_id=job_id)
        elif task.exception() is not None:
            logger.error(
                "job_failed",
                job_id=job_id,
                error=str(task.exception()),
                error_type=type(task.exception()).__name__,
            )
        else:
            logger.info("job_completed", job_id=job_id, **task.result().model_dump())

    def get_progress(self, job_id: str) -> ProgressSnapshot:
        return self.get_job(job_id).tracker.snapshot()

    def get_records(self, job_id: str) -> List[ToolRecord]:
        return self.get_job(job_id).records

    def cancel(self, job_id: str) -> None:
        """Signal cancellation; in-flight attempts abort, unstarted records are skipped."""
        job = self.get_job(job_id)
        job.token.cancel(f"job {job_id} cancelled")
        logger.info("job_cancel_requested", job_id=job_id, running=job.is_running)

    def list_jobs(self) -> List[str]:
        return list(self._jobs)
