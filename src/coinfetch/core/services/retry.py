"""Exponential backoff retry for calls that bypass the cache."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from coinfetch.core.entities.retry_policy import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


async def retry_with_policy(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Invoke an operation, retrying failures according to a policy.

    The operation is awaited up to ``policy.max_attempts`` times. After
    each failed attempt that still has a successor, the call sleeps for
    the next delay of the policy. When attempts run out the last
    failure propagates unchanged.

    Args:
        operation: Zero-argument coroutine function to invoke.
        policy: Attempt budget and delay schedule.
        retry_on: Exception types that trigger a retry. Anything else
            propagates immediately.
        sleep: Awaitable used to wait between attempts.

    Returns:
        The value returned by the first successful attempt.
    """
    delays = policy.delays()
    attempt = 1

    while True:
        try:
            return await operation()
        except retry_on as e:
            delay = next(delays, None)
            if delay is None:
                raise
            logger.warning(
                "Attempt %d/%d failed (%s); retrying in %.3fs",
                attempt,
                policy.max_attempts,
                e,
                delay,
            )
            await sleep(delay)
            attempt += 1


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    initial_delay: float = 0.3,
    backoff_multiplier: float = 2.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Invoke an operation with exponential backoff between attempts.

    With the defaults an operation that keeps failing is invoked three
    times, with waits of 0.3s and then 0.6s between invocations.

    Args:
        operation: Zero-argument coroutine function to invoke.
        max_attempts: Maximum number of invocations.
        initial_delay: Seconds to wait before the first retry.
        backoff_multiplier: Factor applied to the delay after each retry.
        retry_on: Exception types that trigger a retry.
        sleep: Awaitable used to wait between attempts.

    Returns:
        The value returned by the first successful attempt.
    """
    policy = RetryPolicy(
        max_attempts=max_attempts,
        initial_delay=initial_delay,
        backoff_multiplier=backoff_multiplier,
    )
    return await retry_with_policy(operation, policy, retry_on=retry_on, sleep=sleep)
