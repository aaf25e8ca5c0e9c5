"""asyncio timers used by the controller: a debouncer and a periodic task."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from fx_converter.utils.logger import get_logger

LOGGER = get_logger(__name__)

AsyncCallback = Callable[[], Awaitable[None]]

__all__ = ["Debouncer", "PeriodicTask"]


class Debouncer:
    """Trailing-edge debounce backed by a cancellable delayed task.

    Each :meth:`trigger` cancels the pending task and starts a new one, so only
    the last trigger inside the window runs ``callback``.
    """

    def __init__(self, callback: AsyncCallback, delay: float) -> None:
        if delay < 0:
            raise ValueError("delay must not be negative")
        self._callback = callback
        self.delay = delay
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self) -> None:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._fire())

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the pending call, if any, to run."""

        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def _fire(self) -> None:
        await asyncio.sleep(self.delay)
        await self._callback()


class PeriodicTask:
    """Run ``callback`` every ``interval`` seconds until stopped."""

    def __init__(self, callback: AsyncCallback, interval: float, *, name: str = "periodic") -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._callback = callback
        self.interval = interval
        self.name = name
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            LOGGER.debug("Running %s task", self.name)
            await self._callback()
