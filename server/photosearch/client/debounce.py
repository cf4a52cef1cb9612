"""Input debouncing on the running asyncio loop."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Run ``callback(value)`` once input has been quiet for ``window`` seconds.

    Each ``trigger`` restarts the window, so only the last value is delivered.
    The callback runs in its own task: once started it is never cancelled by
    later triggers.
    """

    def __init__(self, window: float, callback: Callable[[T], Awaitable[None]]) -> None:
        self.window = window
        self._callback = callback
        self._timer: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def trigger(self, value: T) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.window, self._fire, value)

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def drain(self) -> None:
        """Wait for callbacks that have already started."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def wait(self) -> None:
        """Wait for the armed timer (if any) to fire and every callback to finish."""
        loop = asyncio.get_running_loop()
        while self._timer is not None:
            await asyncio.sleep(max(self._timer.when() - loop.time(), 0))
        await self.drain()

    def _fire(self, value: T) -> None:
        self._timer = None
        task = asyncio.ensure_future(self._callback(value))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Debounced callback failed", exc_info=task.exception())
