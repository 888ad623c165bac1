"""Background task that runs a unit of work on a fixed interval."""

import asyncio
import contextlib
import logging

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Runs ``tick()`` every ``interval_seconds`` on the running event loop.

    Ticks never overlap and are never queued: the next sleep starts only
    after the previous tick finished, so a slow tick simply pushes the
    schedule back. An exception from one tick is logged and the loop keeps
    going.

    Subclasses implement ``tick()``.
    """

    name = "periodic task"

    def __init__(self, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def tick(self) -> None:
        raise NotImplementedError

    async def run_once(self) -> bool:
        """Run one tick, logging and swallowing any failure.

        Returns:
            True if the tick completed without raising.
        """
        try:
            await self.tick()
        except Exception:
            logger.exception("%s tick failed", self.name.capitalize())
            return False
        return True

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.run_once()

    async def start(self) -> None:
        """Start the background loop. Does nothing if already running."""
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=self.name)
        logger.info("Started %s every %ss", self.name, self.interval_seconds)

    async def stop(self) -> None:
        """Cancel the background loop and wait for it to finish.

        Safe to call more than once, or before ``start()``.
        """
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Stopped %s", self.name)
