"""Trailing-edge debounce built on event loop timer handles."""

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional, Set

logger = logging.getLogger(__name__)


class Debouncer:
    """Owns at most one pending timer.

    Each ``schedule`` call cancels the pending timer (if any) and arms a new
    one, so the action runs once, *delay* seconds after the last call.
    Coroutine actions are started as tasks when the timer fires; those tasks
    are never cancelled by later calls.
    """

    def __init__(self, name: str, delay: float):
        """Initialize debouncer."""
        self.name = name
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()
        self._fired_count = 0

    @property
    def pending(self) -> bool:
        """True while a timer is armed and has not fired."""
        return self._handle is not None

    @property
    def fired_count(self) -> int:
        return self._fired_count

    def schedule(self, action: Callable[..., Any], *args: Any) -> None:
        """Arm the timer for *action*, replacing any pending one."""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, action, args)

    def cancel(self) -> bool:
        """Cancel the pending timer. Returns True if one was pending."""
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        logger.debug(f"Debouncer '{self.name}' cancelled pending timer")
        return True

    def _fire(self, action: Callable[..., Any], args: tuple) -> None:
        self._handle = None
        self._fired_count += 1
        result = action(*args)
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for actions started by fired timers to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Cancel the pending timer and wait for running actions."""
        self.cancel()
        await self.drain()
