"""
Resolution orchestrator.

Drives a batch of records through classification, the supplier strategies
and the merge step with bounded concurrency:

    record --classify--+--> unsupported type -> all-NA fill   (success)
                       +--> unknown supplier -> failed result (fail)
                       +--> strategy via RetryEnvelope -> merge (success if any value)

One task is created per record; a FIFO semaphore caps in-flight resolutions
at ``max_concurrency`` and makes records start in input order. Progress is
published to an optional sink before and after every record, and once more
when the batch ends (also after cancellation).
"""
import asyncio
import inspect
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, Union

import structlog

from catalog_enricher.config import settings
from catalog_enricher.models.catalog import SupplierId
from catalog_enricher.models.progress import ProgressSnapshot
from catalog_enricher.models.record import ToolRecord
from catalog_enricher.models.spec_result import SpecResult
from catalog_enricher.services.cancellation import CancellationToken
from catalog_enricher.services.extraction.part_number import PartNumberDecoder
from catalog_enricher.services.progress import ProgressTracker
from catalog_enricher.services.retry import RetryEnvelope
from catalog_enricher.services.suppliers.registry import StrategyRegistry

logger = structlog.get_logger(__name__)

ProgressSink = Callable[[ProgressSnapshot], Union[None, Awaitable[None]]]


async def publish(sink: Optional[ProgressSink], snapshot: ProgressSnapshot) -> None:
    """Deliver a snapshot; sink failures are logged and never abort the batch."""
    if sink is None:
        return
    try:
        outcome = sink(snapshot)
        if inspect.isawaitable(outcome):
            await outcome
    except Exception as e:
        logger.warning(
            "progress_sink_failed",
            error=str(e),
            error_type=type(e).__name__,
            completed=snapshot.completed,
        )


class ResolutionOrchestrator:
    """Bounded-concurrency batch resolution."""

    def __init__(
        self,
        registry: StrategyRegistry,
        envelope: Optional[RetryEnvelope] = None,
        max_concurrency: Optional[int] = None,
    ):
        """
        Args:
            registry: Strategy per supplier identity
            envelope: Retry/timeout envelope (defaults to config values)
            max_concurrency: In-flight ceiling (defaults to config)
        """
        self.registry = registry
        self.envelope = envelope or RetryEnvelope()
        self.max_concurrency = max_concurrency or settings.max_concurrency
        self._log = logger.bind(component="ResolutionOrchestrator")

    async def run(
        self,
        records: Sequence[ToolRecord],
        tracker: Optional[ProgressTracker] = None,
        sink: Optional[ProgressSink] = None,
        token: Optional[CancellationToken] = None,
    ) -> ProgressSnapshot:
        """Resolve every record in place.

        Records merged before a cancellation keep their values; records not
        yet started are skipped.

        Returns:
            Final progress snapshot
        """
        tracker = tracker or ProgressTracker(len(records))
        token = token or CancellationToken()
        semaphore = asyncio.Semaphore(self.max_concurrency)

        self._log.info(
            "resolution_started",
            total=len(records),
            max_concurrency=self.max_concurrency,
        )

        tasks = [
            asyncio.create_task(self._process(record, records, tracker, sink, token, semaphore))
            for record in records
        ]
        try:
            await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                task.cancel()
            final = tracker.close()
            await publish(sink, final)
            self._log.info(
                "resolution_finished",
                total=final.total,
                completed=final.completed,
                success=final.success_count,
                failed=final.fail_count,
                cancelled=token.cancelled,
            )
        return final

    async def _process(
        self,
        record: ToolRecord,
        records: Sequence[ToolRecord],
        tracker: ProgressTracker,
        sink: Optional[ProgressSink],
        token: CancellationToken,
        semaphore: asyncio.Semaphore,
    ) -> None:
        async with semaphore:
            if token.cancelled:
                return
            await publish(sink, tracker.start(record.tool_description))
            try:
                result, success = await self.resolve(record, token)
            except asyncio.CancelledError:
                if token.cancelled:
                    self._log.info("record_cancelled", row=record.row_index)
                    return
                raise

            written = record.merge(result)
            position = tracker.completed + 1
            next_item = records[position].tool_description if position < len(records) else None
            snapshot = tracker.finish(success, next_item)

            self._log.info(
                "record_resolved",
                row=record.row_index,
                description=record.tool_description,
                success=success,
                error=result.error_message,
                written=written,
            )
            await publish(sink, snapshot)

    async def resolve(
        self, record: ToolRecord, token: CancellationToken
    ) -> Tuple[SpecResult, bool]:
        """Classify a record and resolve it.

        Returns:
            (result, counted_as_success)
        """
        if not record.is_supported_type:
            return SpecResult.all_na(), True

        strategy = None
        if record.supplier is not SupplierId.UNRECOGNIZED:
            strategy = self.registry.get(record.supplier.value)
        if strategy is None:
            return SpecResult.failed(f"Unknown supplier: {record.procurement_channel}"), False

        result = await self.envelope.resolve(strategy, record, token)
        return result, result.success or result.has_any_value()


def apply_pattern_fallback(
    records: Sequence[ToolRecord],
    decoder: Optional[PartNumberDecoder] = None,
) -> List[ToolRecord]:
    """Fill still-absent slots from part-number patterns.

    A separate, explicitly invoked stage: values inferred here are not
    verified against any supplier source.

    Returns:
        Records that received at least one value
    """
    decoder = decoder or PartNumberDecoder()
    enriched = []
    for record in records:
        if not record.missing_slots():
            continue
        result = decoder.decode(record)
        filled = [slot for slot in record.merge(result) if result.has_value(slot)]
        if filled:
            enriched.append(record)
            logger.info(
                "pattern_fallback_applied",
                row=record.row_index,
                description=record.tool_description,
                slots=filled,
            )
    return enriched
