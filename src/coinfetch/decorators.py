"""Retry decorators.

These decorators wrap async callables with the same exponential
backoff as :func:`coinfetch.core.services.retry.retry_with_backoff`.
"""

import asyncio
import functools
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from coinfetch.core.entities.retry_policy import RetryPolicy
from coinfetch.core.services.retry import retry_with_policy

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def with_backoff(
    max_attempts: int = 3,
    initial_delay: float = 0.3,
    backoff_multiplier: float = 2.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> Callable[[F], F]:
    """Decorator retrying an async function with exponential backoff.

    Every call of the decorated function gets its own attempt budget.

    Args:
        max_attempts: Maximum number of invocations per call.
        initial_delay: Seconds to wait before the first retry.
        backoff_multiplier: Factor applied to the delay after each retry.
        retry_on: Exception types that trigger a retry.
        sleep: Awaitable used to wait between attempts.

    Returns:
        Decorated function.

    Example:
        @with_backoff(max_attempts=5, retry_on=(NetworkError,))
        async def load_markets() -> list[dict]:
            return await cache.fetch_with_cache("/coins/markets", params)
    """
    policy = RetryPolicy(
        max_attempts=max_attempts,
        initial_delay=initial_delay,
        backoff_multiplier=backoff_multiplier,
    )

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            return await retry_with_policy(
                lambda: func(*args, **kwargs),
                policy,
                retry_on=retry_on,
                sleep=sleep,
            )

        return wrapper  # type: ignore

    return decorator
