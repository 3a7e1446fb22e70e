"""Cancellable self-rescheduling for the poll loops."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

_logger = logging.getLogger(__name__)


def next_delay(refresh_rate: float, elapsed: float) -> float:
    """Delay before the next pass so that passes start ``refresh_rate`` apart."""
    return max(0.0, refresh_rate - elapsed)


class LoopScheduler:
    """Hold at most one pending timer and one running task per named loop.

    Each loop reschedules itself through :meth:`call_later`; :meth:`close`
    cancels every pending timer and running task so a client can shut down
    without leaving callbacks on the event loop.
    """

    def __init__(self) -> None:
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._tasks: dict[str, asyncio.Task[Any]] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def pending(self, name: str) -> bool:
        """Whether *name* has a timer waiting to fire."""
        handle = self._timers.get(name)
        return handle is not None and not handle.cancelled()

    def call_later(self, name: str, delay: float, fn: Callable[[], Awaitable[Any]]) -> None:
        """Run ``fn()`` as a task named *name* after *delay* seconds."""
        if self._closed:
            return
        previous = self._timers.pop(name, None)
        if previous is not None:
            previous.cancel()
        loop = asyncio.get_running_loop()
        _logger.debug("Next %s run in %.3fs", name, delay)
        self._timers[name] = loop.call_later(delay, self._spawn, name, fn)

    def start(self, name: str, fn: Callable[[], Awaitable[Any]]) -> asyncio.Task[Any]:
        """Run ``fn()`` now as the task of loop *name* and return the task."""
        task = asyncio.ensure_future(fn())
        self._tasks[name] = task
        task.add_done_callback(lambda t, n=name: self._task_done(n, t))
        return task

    def _spawn(self, name: str, fn: Callable[[], Awaitable[Any]]) -> None:
        self._timers.pop(name, None)
        if self._closed:
            return
        self.start(name, fn)

    def _task_done(self, name: str, task: asyncio.Task[Any]) -> None:
        if self._tasks.get(name) is task:
            del self._tasks[name]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.error("%s loop crashed", name, exc_info=exc)

    async def close(self) -> None:
        """Cancel all pending timers and running loop tasks."""
        self._closed = True
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        # close() may be reached from inside one of the loops.
        current = asyncio.current_task()
        tasks = [task for task in self._tasks.values() if task is not current]
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
