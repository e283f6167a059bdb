"""
Request pacing for upstream APIs.

The AUR asks clients to be polite. RateLimiter is a fixed-interval gate:
each call to wait() returns no sooner than `interval` seconds after the
previous one. Clock and sleep are injectable so pacing can be tested without
real time passing.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """Fixed-interval gate for sequential requests."""

    def __init__(
        self,
        interval: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self.last_acquired: float | None = None

    async def wait(self) -> float:
        """Suspend until the next request may go out. Returns the time slept."""
        delay = 0.0
        if self.last_acquired is not None:
            delay = self.interval - (self._clock() - self.last_acquired)
            if delay > 0:
                logger.debug(f"Rate limiter pausing {delay:.3f}s")
                await self._sleep(delay)
            else:
                delay = 0.0

        self.last_acquired = self._clock()
        return delay

    def reset(self) -> None:
        """Forget the last request; the next wait() returns immediately."""
        self.last_acquired = None
