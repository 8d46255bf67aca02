"""Retry/timeout envelope around a supplier strategy call.

Every strategy invocation goes through ``RetryEnvelope.resolve``:

    - at most ``max_attempts`` attempts (3)
    - each attempt bounded by a deadline (15 s, or the strategy's own
      ``attempt_timeout`` when it declares a longer one)
    - linear backoff: the delay before retry n is ``base_delay * n``
      (0.5 s, then 1.0 s)

The envelope never raises for strategy failures: the terminal failure is
classified into a failed SpecResult. Cancellation of the job is the only
signal that passes through.
"""
import asyncio
from typing import Awaitable, Callable, Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from catalog_enricher.config import settings
from catalog_enricher.errors.exceptions import SupplierConnectionError
from catalog_enricher.models.record import ToolRecord
from catalog_enricher.models.spec_result import SpecResult
from catalog_enricher.services.cancellation import CancellationToken

logger = structlog.get_logger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


def classify_failure(error: BaseException) -> str:
    """Terminal error message for a failed resolution."""
    if isinstance(error, asyncio.TimeoutError):
        return "Timeout"
    if isinstance(error, SupplierConnectionError):
        return f"Website error: {error.message}"
    if isinstance(error, httpx.HTTPError):
        return f"Website error: {error}"
    return str(error) or type(error).__name__


class RetryEnvelope:
    """Bounded retries with per-attempt deadline and linear backoff."""

    def __init__(
        self,
        max_attempts: Optional[int] = None,
        attempt_timeout: Optional[float] = None,
        base_delay: Optional[float] = None,
        sleep: Optional[SleepFn] = None,
    ):
        """
        Args:
            max_attempts: Attempt cap (defaults to config)
            attempt_timeout: Default per-attempt deadline in seconds
            base_delay: Backoff unit in seconds
            sleep: Backoff sleep override; defaults to the job token's sleep
        """
        self.max_attempts = max_attempts or settings.max_attempts
        self.attempt_timeout = attempt_timeout or settings.attempt_timeout
        self.base_delay = settings.retry_base_delay if base_delay is None else base_delay
        self._sleep = sleep
        self._log = logger.bind(component="RetryEnvelope")

    def timeout_for(self, strategy) -> float:
        """Deadline for one attempt of ``strategy``; strategies may only extend it."""
        requested = getattr(strategy, "attempt_timeout", None)
        if requested and requested > self.attempt_timeout:
            return float(requested)
        return self.attempt_timeout

    async def resolve(
        self,
        strategy,
        record: ToolRecord,
        token: Optional[CancellationToken] = None,
    ) -> SpecResult:
        """Run ``strategy.fetch_specs`` under the retry envelope.

        Returns:
            The strategy's result, or a failed SpecResult after the last attempt

        Raises:
            asyncio.CancelledError: The job token fired
        """
        token = token or CancellationToken()
        timeout = self.timeout_for(strategy)
        log = self._log.bind(
            supplier=getattr(strategy, "identity", "?"),
            description=record.tool_description,
        )

        def before_sleep(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            log.warning(
                "resolution_attempt_failed",
                attempt=retry_state.attempt_number,
                max_attempts=self.max_attempts,
                delay=retry_state.next_action.sleep if retry_state.next_action else None,
                error=classify_failure(error) if error else None,
                error_type=type(error).__name__ if error else None,
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.base_delay, increment=self.base_delay),
            retry=retry_if_exception_type(Exception),
            sleep=self._sleep or token.sleep,
            before_sleep=before_sleep,
            reraise=True,
        )

        result: Optional[SpecResult] = None
        try:
            async for attempt in retrying:
                with attempt:
                    result = await token.run(
                        asyncio.wait_for(strategy.fetch_specs(record, token), timeout=timeout)
                    )
        except asyncio.CancelledError:
            log.info("resolution_cancelled")
            raise
        except Exception as e:
            message = classify_failure(e)
            log.error(
                "resolution_failed",
                attempts=self.max_attempts,
                error=message,
                error_type=type(e).__name__,
            )
            return SpecResult.failed(message)

        return result if result is not None else SpecResult.failed("No result")
