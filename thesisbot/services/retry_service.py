"""Fixed-delay retry wrapper for forwarding requests to the analysis backend."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

import httpx

from thesisbot.exceptions import RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3
DEFAULT_DELAY = 1.0


def is_retryable(exc: BaseException) -> bool:
    """Classify a failure as transient (retry) or permanent (raise now).

    An upstream 4xx is permanent.  5xx, timeouts, connection errors and
    anything else (malformed bodies included) count as transient.
    """
    status: Optional[int] = getattr(exc, "status_code", None)
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
    if status is not None and 400 <= status < 500:
        return False
    return True


async def forward_with_retry(
    operation: Callable[[], Awaitable[T]],
    attempts: int = DEFAULT_ATTEMPTS,
    delay: float = DEFAULT_DELAY,
    retryable: Callable[[BaseException], bool] = is_retryable,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run *operation* until it succeeds or the attempt budget is spent.

    Args:
        operation: Zero-argument coroutine factory performing the round trip
        attempts: Total number of attempts (not retries)
        delay: Fixed pause between attempts in seconds
        retryable: Predicate deciding whether a failure consumes an attempt
        sleep: Awaitable sleep, swappable in tests

    Returns:
        The first successful result

    Raises:
        The last failure once attempts are exhausted, or a permanent
        failure immediately.
    """
    remaining = attempts
    last_error: Optional[BaseException] = None

    while remaining > 0:
        try:
            return await operation()
        except Exception as e:
            last_error = e
            if not retryable(e):
                raise
            remaining -= 1
            if remaining > 0:
                logger.warning("Request failed (%s); retrying, %d attempts remaining", e, remaining)
                await sleep(delay)
                continue
            break

    if last_error is not None:
        raise last_error
    raise RetryExhaustedError("Failed after all retries")
