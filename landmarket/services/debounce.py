"""Debouncer - fire a callback once input has been quiet for a fixed window."""

import asyncio
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from landmarket.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

T = TypeVar("T")


class Debouncer(Generic[T]):
    """
    Cancellable fire-once timer.

    Each ``trigger(value)`` cancels the pending fire and schedules a new one
    ``delay_seconds`` later, so only the last value of a burst reaches the
    callback. When the delay elapses the running callback is detached from
    the timer: a later ``trigger`` schedules a new fire but never cancels a
    callback that has already started. After ``close()`` nothing fires.
    """

    def __init__(self, delay_seconds: float, callback: Callable[[T], Awaitable[Any]], name: str = "debounce"):
        self.delay_seconds = delay_seconds
        self.name = name
        self._callback = callback
        self._timer: Optional[asyncio.Task] = None
        self._running: set[asyncio.Task] = set()
        self._closed = False

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def trigger(self, value: T) -> None:
        if self._closed:
            logger.debug("Trigger ignored on closed debouncer", debouncer=self.name)
            return

        if self.pending:
            self._timer.cancel()
            logger.debug("Debounce timer reset", debouncer=self.name)

        self._timer = asyncio.create_task(self._fire_after_delay(value))

    def cancel(self) -> None:
        if self.pending:
            self._timer.cancel()
        self._timer = None

    def close(self) -> None:
        """Cancel the pending fire and any callback still running."""
        self._closed = True
        self.cancel()
        for task in list(self._running):
            task.cancel()

    async def _fire_after_delay(self, value: T) -> None:
        await asyncio.sleep(self.delay_seconds)

        if self._closed:
            return

        current = asyncio.current_task()
        if self._timer is current:
            self._timer = None

        logger.debug(
            "Debounce window elapsed",
            debouncer=self.name,
            debounce_window_seconds=self.delay_seconds,
        )

        # From here on a new trigger starts a fresh timer instead of cancelling us
        self._running.add(current)
        try:
            await self._callback(value)
        except Exception as e:
            # Nobody awaits this task, so log instead of leaving it unretrieved
            logger.error(
                "Debounced callback failed",
                debouncer=self.name,
                error=str(e),
                exc_info=True,
            )
        finally:
            self._running.discard(current)
