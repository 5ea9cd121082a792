"""Token bucket rate limiter for the market price API."""
import asyncio
import logging
import time
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class TokenBucket:
    """Async token bucket.

    Starts full. Each ``acquire`` consumes one token; when the bucket is
    empty the caller sleeps until enough tokens have refilled instead of
    being rejected.
    """

    def __init__(
        self,
        capacity: float,
        refill_per_second: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if capacity < 1 or refill_per_second <= 0:
            raise ValueError("Token bucket needs capacity >= 1 and a positive refill rate")
        self.capacity = float(capacity)
        self.refill_per_second = float(refill_per_second)
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(capacity)
        self._last_refill = clock()
        self._lock = asyncio.Lock()

    @property
    def tokens(self) -> float:
        return self._tokens

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(self.capacity, self._tokens + elapsed * self.refill_per_second)
        self._last_refill = now

    async def acquire(self) -> None:
        """Wait for and consume one token."""
        async with self._lock:
            self._refill()
            if self._tokens < 1:
                wait_time = (1 - self._tokens) / self.refill_per_second
                logger.debug("Rate limited, waiting %.2fs", wait_time)
                await self._sleep(wait_time)
                self._refill()
            self._tokens = max(0.0, self._tokens - 1)
