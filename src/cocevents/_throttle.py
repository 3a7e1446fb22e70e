"""Global request pacing."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

from cocevents.exceptions import CocConfigError


class RequestThrottle:
    """Keep consecutive releases at least ``1 / requests_per_second`` apart.

    This is pacing, not a token bucket: there is no burst allowance. Each
    call waits out whatever is left of the interval since the previous
    release, and callers are served in call order.
    """

    def __init__(
        self,
        requests_per_second: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if requests_per_second <= 0:
            raise CocConfigError(f"requests_per_second must be positive, got {requests_per_second}")
        self._interval = 1.0 / requests_per_second
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_release: float | None = None

    @property
    def interval(self) -> float:
        """Minimum spacing between two releases, in seconds."""
        return self._interval

    async def throttle(self) -> None:
        """Suspend until the minimum spacing since the last release has elapsed."""
        async with self._lock:
            if self._last_release is not None:
                remaining = self._interval - (self._clock() - self._last_release)
                if remaining > 0:
                    await self._sleep(remaining)
            self._last_release = self._clock()
