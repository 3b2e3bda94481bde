"""Retry policy entity."""

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff settings for a single call.

    ``max_attempts`` counts invocations of the operation, so a policy
    with ``max_attempts=3`` sleeps at most twice. A value of 0 still
    allows the first invocation. There is no jitter and no cap on the
    delay.
    """

    max_attempts: int = 3
    initial_delay: float = 0.3
    backoff_multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        if self.initial_delay < 0:
            raise ValueError("initial_delay must be >= 0")
        if self.backoff_multiplier <= 0:
            raise ValueError("backoff_multiplier must be > 0")

    def delays(self) -> Iterator[float]:
        """Yield the wait before each retry, in order.

        Returns:
            An iterator of ``max(max_attempts, 1) - 1`` delays in seconds.
        """
        delay = self.initial_delay
        for _ in range(max(self.max_attempts, 1) - 1):
            yield delay
            delay *= self.backoff_multiplier
