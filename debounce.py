"""
Asyncio debouncer used to coalesce rapid job description edits.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set

LOGGER = logging.getLogger(__name__)


class Debouncer:
    """
    Run a coroutine callback once the input has been quiet for ``delay`` seconds.

    Every ``trigger`` restarts the timer, so a burst of calls results in a
    single callback invocation with the last arguments. A callback that has
    already started is left to finish.
    """

    def __init__(self, delay: float, callback: Callable[..., Awaitable[Any]]) -> None:
        self.delay = delay
        self._callback = callback
        self._timer: Optional[asyncio.TimerHandle] = None
        self._running: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def trigger(self, *args: Any) -> None:
        """Arm (or re-arm) the timer. Must be called from the running event loop."""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay, self._fire, args)

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, args: tuple) -> None:
        self._timer = None
        task = asyncio.ensure_future(self._callback(*args))
        self._running.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: asyncio.Task) -> None:
        self._running.discard(task)
        if not task.cancelled() and task.exception() is not None:
            LOGGER.error("Debounced callback failed: %s", task.exception())

    async def drain(self) -> None:
        """Wait until no timer is armed and no callback is running."""
        while self._timer is not None or self._running:
            if self._running:
                await asyncio.gather(*list(self._running), return_exceptions=True)
            else:
                await asyncio.sleep(min(self.delay, 0.05) or 0)
