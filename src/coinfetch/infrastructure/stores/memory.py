"""In-memory cache store implementation."""

import time
from collections.abc import Callable

from cachetools import TTLCache  # type: ignore[import-untyped]

from coinfetch.core.entities.cache_entry import CacheEntry


class InMemoryCacheStore:
    """In-memory cache store using LRU with TTL support.

    Suitable for single-process deployments. Entries live for the
    lifetime of the store object; cachetools drops expired entries
    lazily and evicts the least recently used one once ``maxsize``
    is reached.
    """

    def __init__(
        self,
        maxsize: int = 1000,
        ttl: float = 300.0,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the in-memory cache store.

        Args:
            maxsize: Maximum number of entries in the store.
            ttl: Seconds after which an entry is dropped.
            timer: Clock used both for stamping entries and for expiry.
        """
        self._maxsize = maxsize
        self._ttl = ttl
        self._timer = timer
        self._cache: TTLCache[str, CacheEntry] = TTLCache(
            maxsize=maxsize,
            ttl=ttl,
            timer=timer,
        )

    def now(self) -> float:
        """Return the current reading of the store clock."""
        return self._timer()

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve the entry stored under a key.

        Args:
            key: The cache key to retrieve.

        Returns:
            The stored entry, or None if not found or expired.
        """
        return self._cache.get(key)

    async def set(self, key: str, value: bytes) -> CacheEntry:
        """Store a value, replacing any entry already under the key.

        Args:
            key: The cache key.
            value: The raw response body to store.

        Returns:
            The new entry.
        """
        entry = CacheEntry(key=key, value=value, stored_at=self.now())
        self._cache[key] = entry
        return entry

    async def delete(self, key: str) -> bool:
        """Delete the entry under a key.

        Args:
            key: The cache key to delete.

        Returns:
            True if the key existed and was deleted, False otherwise.
        """
        try:
            del self._cache[key]
            return True
        except KeyError:
            return False

    async def clear(self) -> None:
        """Remove every entry."""
        self._cache.clear()

    def __len__(self) -> int:
        """Return the number of live entries in the store."""
        return len(self._cache)

    @property
    def maxsize(self) -> int:
        """Return the maximum size of the store."""
        return self._maxsize

    @property
    def ttl(self) -> float:
        """Return the store TTL in seconds."""
        return self._ttl
