"""Retry helper for flaky async calls."""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


async def with_exponential_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int = 5,
    base_delay: float = 0.5,
    max_delay: float = 8.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await `operation()` until it succeeds, backing off exponentially between tries.

    The delay before retry `n` (1-based) is `base_delay * 2 ** (n - 1)`, capped at
    `max_delay`. Exceptions outside `retry_on` propagate immediately.

    Args:
        operation:
            Zero-argument callable returning a fresh awaitable on each call.
        attempts:
            Total number of tries, including the first.
        base_delay:
            Delay in seconds before the first retry.
        max_delay:
            Upper bound for a single delay.
        retry_on:
            Exception types that trigger a retry.
        sleep:
            Awaitable sleep function, swappable in tests.

    Returns:
        The operation's result.

    Raises:
        The last exception raised by `operation` once attempts are exhausted.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except retry_on as e:
            if attempt == attempts:
                logger.warning(
                    "retry_exhausted",
                    extra={"attempts": attempts, "error": repr(e)},
                )
                raise
            delay = min(base_delay * 2 ** (attempt - 1), max_delay)
            logger.warning(
                "retrying_after_failure",
                extra={"attempt": attempt, "delay": delay, "error": repr(e)},
            )
            await sleep(delay)

    # Unreachable: the loop either returns or raises.
    raise AssertionError("retry loop exited without a result")
