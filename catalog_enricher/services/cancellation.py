"""Cooperative cancellation for a resolution job.

A single token is created per job and handed down the whole chain
(orchestrator -> envelope -> strategy -> transport). Every suspension point
either checks it or races against it, so cancelling the job aborts in-flight
attempts promptly instead of waiting for their deadlines.
"""
import asyncio
from typing import Awaitable, Optional, TypeVar

T = TypeVar("T")


class CancellationToken:
    """Thin wrapper around an asyncio.Event.

    Usage:
        token = CancellationToken()
        html = await token.run(client.get(url))
        await token.sleep(0.5)
        token.cancel()
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise asyncio.CancelledError(self.reason)

    async def wait(self) -> None:
        await self._event.wait()

    async def sleep(self, delay: float) -> None:
        """Sleep for ``delay`` seconds, raising CancelledError if cancelled meanwhile."""
        self.raise_if_cancelled()
        if delay <= 0:
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return
        self.raise_if_cancelled()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first.

        On cancellation the inner task is cancelled and CancelledError raised.
        """
        self.raise_if_cancelled()
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise asyncio.CancelledError(self.reason)
