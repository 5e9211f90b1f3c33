import asyncio
import logging
from functools import wraps
from typing import Any, Callable, Tuple, Type

from config.constants import HTTP_CONFIG

logger = logging.getLogger(__name__)


def backoff_delay(attempt: int, base_delay: float, max_delay: float, exponential_base: float = 2.0) -> float:
    """Delay before retry number `attempt` (0-based)."""
    return min(base_delay * (exponential_base ** attempt), max_delay)


def async_retry(
    max_attempts: int = HTTP_CONFIG.MAX_ATTEMPTS,
    base_delay: float = HTTP_CONFIG.RETRY_BASE_DELAY,
    max_delay: float = HTTP_CONFIG.RETRY_MAX_DELAY,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,)
):
    """
    Retry an async callable on the listed exception types only.

    If the wrapped call receives a `deadline` keyword (event-loop time), a
    retry is skipped when the backoff would end at or past it; the last
    error is raised instead.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            deadline = kwargs.get("deadline")
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    attempt += 1
                    if attempt >= max_attempts:
                        logger.error(f"{func.__name__} failed after {attempt} attempts: {e}")
                        raise

                    delay = backoff_delay(attempt - 1, base_delay, max_delay)
                    if deadline is not None and asyncio.get_running_loop().time() + delay >= deadline:
                        logger.warning(f"{func.__name__} failed with no time left to retry: {e}")
                        raise

                    logger.warning(
                        f"{func.__name__} failed (attempt {attempt}/{max_attempts}), "
                        f"retrying in {delay:.2f}s: {e}"
                    )
                    await asyncio.sleep(delay)

        return wrapper
    return decorator
