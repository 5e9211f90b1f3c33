import asyncio
import time
from typing import Callable


class RateLimiter:
    """
    Token bucket for one provider: `calls_per_second` sustained, bursts of
    up to `burst` calls. `acquire` waits until a token is free.
    """

    def __init__(self, calls_per_second: float, burst: int = 1, clock: Callable[[], float] = time.monotonic):
        if calls_per_second <= 0:
            raise ValueError("calls_per_second must be positive")
        self.calls_per_second = calls_per_second
        self.capacity = max(1, burst)
        self._tokens = float(self.capacity)
        self._clock = clock
        self._updated = clock()
        self._lock = asyncio.Lock()

    async def acquire(self):
        async with self._lock:
            self._refill()
            if self._tokens < 1.0:
                await asyncio.sleep((1.0 - self._tokens) / self.calls_per_second)
                self._refill()
            self._tokens = max(0.0, self._tokens - 1.0)

    def _refill(self):
        now = self._clock()
        self._tokens = min(self.capacity, self._tokens + (now - self._updated) * self.calls_per_second)
        self._updated = now
