"""Fixed-interval polling as a scoped subscription."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Optional

from ..utils.logger import get_logger

logger = get_logger("poller")

PollCallback = Callable[[], Awaitable[object]]


class PollHandle:
    """Handle of a running poll loop. Whoever started it must stop it."""

    def __init__(self, task: asyncio.Task):
        self._task = task

    @property
    def active(self) -> bool:
        return not self._task.done()

    async def stop(self) -> None:
        """Cancel the poll loop and wait for it to finish. Safe to call twice."""
        if self._task.done():
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass


class Poller:
    """Calls ``callback`` immediately and then every ``interval`` seconds."""

    def __init__(self, callback: PollCallback, interval: float = 5.0, name: Optional[str] = None):
        if interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {interval}")
        self.callback = callback
        self.interval = interval
        self.name = name or getattr(callback, "__qualname__", "poll")

    def start(self) -> PollHandle:
        """Start polling in a new task and return its handle."""
        task = asyncio.create_task(self._loop(), name=f"poll:{self.name}")
        logger.info(f"[Poller] started {self.name} every {self.interval}s")
        return PollHandle(task)

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[PollHandle]:
        """Poll for the duration of the ``async with`` block."""
        handle = self.start()
        try:
            yield handle
        finally:
            await handle.stop()
            logger.info(f"[Poller] stopped {self.name}")

    async def _loop(self) -> None:
        while True:
            try:
                await self.callback()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception(f"[Poller] {self.name} callback failed")
            await asyncio.sleep(self.interval)
