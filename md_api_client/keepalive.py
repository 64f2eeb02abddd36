"""
Periodic keep-alive task for md_api_client.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

# The server expires idle sessions; 30 minutes stays well inside its window.
KEEP_ALIVE_INTERVAL = 30 * 60


class KeepAliveTimer:
    """
    Runs ``callback`` every ``interval`` seconds until stopped.

    Failures of the callback are logged and otherwise ignored, the timer
    keeps its schedule. Starting a running timer cancels the old task and
    schedules a new one. Must be started from inside a running event loop.
    """

    def __init__(self, callback: Callable[[], Awaitable[Any]],
                 interval: float = KEEP_ALIVE_INTERVAL):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.callback = callback
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the timer, replacing a running one."""
        if self.running:
            logger.debug("Keep-alive timer already running, restarting it")
            self._task.cancel()
        self._task = asyncio.create_task(self._loop())

    def stop(self) -> None:
        """Stop the timer. Does nothing if it is not running."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def aclose(self) -> None:
        """Stop the timer and wait for its task to finish."""
        task = self._task
        self.stop()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.callback()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"Keep-alive call failed: {e}")
