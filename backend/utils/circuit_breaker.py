import asyncio
import time
from enum import Enum
from typing import Any, Callable, Optional

from config import logger
from config.constants import HTTP_CONFIG
from exceptions import CircuitBreakerOpenException


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """
    Per-collaborator breaker.

    Opens after `failure_threshold` consecutive failures of the expected
    kind. While open every call fails fast. After `recovery_timeout`
    seconds one trial call is let through (half-open); concurrent calls
    keep failing fast until the trial settles the state.
    """

    def __init__(
        self,
        failure_threshold: int = HTTP_CONFIG.BREAKER_FAILURE_THRESHOLD,
        recovery_timeout: float = HTTP_CONFIG.BREAKER_RECOVERY_TIMEOUT,
        expected_exception: Any = Exception,
        name: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception
        self.name = name or "unnamed"
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: Optional[float] = None
        self._trial_in_flight = False
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    async def call(self, func: Callable, *args, **kwargs) -> Any:
        await self._admit()
        try:
            result = await func(*args, **kwargs)
        except self.expected_exception:
            await self._record(success=False)
            raise
        except BaseException:
            # other outcomes say nothing about the collaborator's health
            await self._release_trial()
            raise
        await self._record(success=True)
        return result

    async def reset(self):
        async with self._lock:
            self._close()

    async def _admit(self):
        async with self._lock:
            if self._state == CircuitState.CLOSED:
                return
            if self._state == CircuitState.OPEN and self._clock() - self._opened_at >= self.recovery_timeout:
                logger.info(f"Circuit {self.name}: half-open, sending one trial call", extra={"circuit_breaker": self.name})
                self._state = CircuitState.HALF_OPEN
            if self._state == CircuitState.HALF_OPEN and not self._trial_in_flight:
                self._trial_in_flight = True
                return
            logger.warning(
                f"Circuit {self.name} is open, failing fast",
                extra={"circuit_breaker": self.name, "failure_count": self._failure_count}
            )
            raise CircuitBreakerOpenException(self.name, self._failure_count)

    async def _record(self, success: bool):
        async with self._lock:
            trialing = self._trial_in_flight
            self._trial_in_flight = False
            if success:
                if trialing:
                    logger.info(f"Circuit {self.name}: trial call succeeded, closing", extra={"circuit_breaker": self.name})
                self._close()
                return

            self._failure_count += 1
            if trialing or self._failure_count >= self.failure_threshold:
                self._state = CircuitState.OPEN
                self._opened_at = self._clock()
                logger.error(
                    f"Circuit {self.name} opened after {self._failure_count} failures",
                    extra={"circuit_breaker": self.name, "failure_count": self._failure_count}
                )

    async def _release_trial(self):
        async with self._lock:
            if self._trial_in_flight:
                self._trial_in_flight = False
                self._state = CircuitState.OPEN

    def _close(self):
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at = None
        self._trial_in_flight = False
