"""Cache entry entity."""

from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class CacheEntry:
    """Immutable cache entry value object.

    Holds the raw body of a successful upstream response together
    with the store clock reading at the time it was stored.
    """

    key: str
    value: bytes
    stored_at: float

    def age(self, now: float) -> float:
        """Return the entry age in seconds.

        Args:
            now: Current reading of the clock that produced ``stored_at``.

        Returns:
            Seconds elapsed since the entry was stored.
        """
        return now - self.stored_at

    def is_fresh(self, ttl: timedelta, now: float) -> bool:
        """Check whether the entry may still be served.

        Args:
            ttl: The cache time-to-live.
            now: Current reading of the store clock.

        Returns:
            True if ``now - stored_at < ttl``, False otherwise.
        """
        return self.age(now) < ttl.total_seconds()
