"""Start-to-start request spacing for the AQS API."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

RATE_LIMIT_SECONDS = 5.0


class RequestThrottle:
    """
    Owns the "last request start" marker.

    The clock must be monotonic and return seconds. The read-then-write of the
    marker happens under a lock that stays held through the wait, so
    concurrent callers are released one interval apart.
    """

    def __init__(
        self,
        interval: float = RATE_LIMIT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self.last_request_start: float | None = None

    async def acquire(self) -> float:
        """Wait until a request may start and record its start time.

        Returns:
            Seconds spent waiting (0.0 when no wait was needed).
        """
        async with self._lock:
            waited = 0.0
            if self.last_request_start is not None:
                elapsed = self._clock() - self.last_request_start
                if elapsed < self.interval:
                    waited = self.interval - elapsed
                    logger.info(f"Rate limiting: waiting {round(waited * 1000)}ms before next request")
                    await self._sleep(waited)

            self.last_request_start = self._clock()
            return waited
