"""Single-admission FIFO gate for outbound requests."""

from __future__ import annotations

import asyncio
from collections import deque


class FetchQueue:
    """Admit one caller at a time, strictly in arrival order.

    ``wait()`` returns once the caller holds admission; the holder must call
    ``release()`` exactly once to hand admission to the next waiter.
    """

    def __init__(self) -> None:
        self._waiters: deque[asyncio.Future[None]] = deque()
        self._busy = False

    @property
    def pending(self) -> int:
        """Number of callers queued behind the current holder."""
        return len(self._waiters)

    @property
    def busy(self) -> bool:
        return self._busy

    async def wait(self) -> None:
        if not self._busy and not self._waiters:
            self._busy = True
            return

        fut: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        try:
            await fut
        except asyncio.CancelledError:
            if fut.done() and not fut.cancelled():
                # Admission was granted just before cancellation; pass it on.
                self.release()
            else:
                try:
                    self._waiters.remove(fut)
                except ValueError:
                    pass
            raise

    def release(self) -> None:
        while self._waiters:
            fut = self._waiters.popleft()
            if not fut.done():
                fut.set_result(None)
                return
        self._busy = False
