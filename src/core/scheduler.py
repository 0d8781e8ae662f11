# src/core/scheduler.py
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Run a synchronous callback every ``interval_s`` seconds on the event loop.

    The callback returns True to keep going and False to finish. Callbacks
    never await, so once ``cancel()`` returns the callback will not run again.
    """

    def __init__(
        self,
        name: str,
        interval_s: float,
        callback: Callable[[], bool],
    ) -> None:
        self.name = name
        self.interval_s = interval_s
        self.callback = callback
        self.ticks = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(), name=self.name)

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the task to finish on its own; returns at once if not running."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            # Cancelled by cancel(); only re-raise if we were cancelled ourselves.
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_s)
            self.ticks += 1
            try:
                keep_going = self.callback()
            except Exception:  # noqa: BLE001
                # keep ticking after a failed callback
                logger.exception("%s tick %d failed", self.name, self.ticks)
                continue
            if not keep_going:
                logger.debug("%s finished after %d ticks", self.name, self.ticks)
                return
