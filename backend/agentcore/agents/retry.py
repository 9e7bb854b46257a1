"""Retry-with-exponential-backoff for arbitrary async operations."""

import asyncio
import functools
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from agentcore.exceptions import ApiError, NetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ── Transient error detection ──────────────────────────────────
_TRANSIENT_STATUS_CODES = {408, 409, 429, 500, 502, 503, 504}


def is_transient(error: BaseException) -> bool:
    """Check if an error is transient and worth retrying."""
    if isinstance(error, ApiError):
        return error.status_code in _TRANSIENT_STATUS_CODES
    if isinstance(error, (NetworkError, asyncio.TimeoutError, ConnectionError)):
        return True
    return False


@dataclass(frozen=True)
class RetryOptions:
    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    backoff_factor: float = 2.0
    should_retry: Optional[Callable[[Exception], bool]] = None

    def delay_for(self, retry_number: int) -> float:
        """Seconds to wait before retry number `retry_number` (1-based)."""
        return min(self.initial_delay * self.backoff_factor ** (retry_number - 1), self.max_delay)


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    options: Optional[RetryOptions] = None,
) -> T:
    """Run fn, retrying on failure up to options.max_retries additional times.

    The most recent error is re-raised unchanged once attempts are exhausted.
    """
    options = options or RetryOptions()
    attempts = options.max_retries + 1

    for attempt in range(1, attempts + 1):
        try:
            return await fn()
        except Exception as e:
            if options.should_retry is not None and not options.should_retry(e):
                logger.debug("Non-retryable error attempt=%d error=%s", attempt, e)
                raise
            if attempt == attempts:
                logger.warning("Giving up after %d attempts error=%s", attempts, e)
                raise
            wait = options.delay_for(attempt)
            logger.warning(
                "Retryable error attempt=%d/%d error=%s retrying_in=%.2fs",
                attempt, attempts, e, wait,
            )
            await asyncio.sleep(wait)

    raise AssertionError("unreachable")


def retry(options: Optional[RetryOptions] = None):
    """Decorator form of with_retry for async functions."""

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            return await with_retry(lambda: func(*args, **kwargs), options)
        return wrapper

    return decorator
