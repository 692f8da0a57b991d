"""Asyncio scheduling policies used by the controller."""

import asyncio
from collections.abc import Awaitable, Callable
from contextlib import suppress
from typing import Any

from currency_converter.logging_config import get_logger

logger = get_logger(__name__)

AsyncCallback = Callable[..., Awaitable[Any]]


class Debouncer:
    """Runs a callback once triggers have been quiet for ``delay`` seconds."""

    def __init__(self, delay: float, callback: AsyncCallback) -> None:
        self.delay = delay
        self.callback = callback
        self._task: asyncio.Task | None = None

    def trigger(self, *args: Any, **kwargs: Any) -> asyncio.Task:
        """Schedule the callback, replacing any call still waiting.

        Returns:
            Task for the scheduled call; it is cancelled if a later trigger supersedes it
        """
        self.cancel()
        self._task = asyncio.create_task(self._run_later(args, kwargs))
        return self._task

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run_later(self, args: tuple, kwargs: dict) -> Any:
        await asyncio.sleep(self.delay)
        return await self.callback(*args, **kwargs)


class Throttler:
    """Runs a callback at most once per ``interval`` seconds; extra triggers are dropped."""

    def __init__(self, interval: float, callback: AsyncCallback) -> None:
        self.interval = interval
        self.callback = callback
        self._last_run: float | None = None

    def ready(self) -> bool:
        """Check whether a trigger right now would run the callback."""
        if self._last_run is None:
            return True
        return asyncio.get_running_loop().time() - self._last_run >= self.interval

    async def trigger(self, *args: Any, **kwargs: Any) -> bool:
        """Run the callback unless it ran within the interval.

        Returns:
            True if the callback ran
        """
        if not self.ready():
            return False
        self._last_run = asyncio.get_running_loop().time()
        await self.callback(*args, **kwargs)
        return True

    def reset(self) -> None:
        self._last_run = None


class PeriodicRefresher:
    """Background task that refreshes rates on a fixed interval."""

    def __init__(
        self,
        interval: float,
        refresh: Callable[[], Awaitable[Any]],
        should_run: Callable[[], bool] = lambda: True,
    ) -> None:
        """Initialize the refresher.

        Args:
            interval: Seconds between refreshes
            refresh: Coroutine function performing the refresh
            should_run: Predicate checked before each refresh (e.g. visible and online)
        """
        self.interval = interval
        self.refresh = refresh
        self.should_run = should_run
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            msg = "Periodic refresher is already running"
            raise RuntimeError(msg)
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if not self.should_run():
                continue
            logger.info("Auto-refreshing exchange rates")
            try:
                await self.refresh()
            except Exception as e:
                # A failed refresh keeps the loop alive until the next interval
                logger.warning(f"Auto-refresh failed: {e}")
