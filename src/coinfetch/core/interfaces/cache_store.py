"""Cache store interface."""

from typing import Protocol

from coinfetch.core.entities.cache_entry import CacheEntry


class ICacheStore(Protocol):
    """Contract for response cache stores.

    A store maps a cache key to at most one CacheEntry and owns the
    clock used to stamp entries. Methods are async so that stores
    backed by external services can implement the same contract.
    """

    def now(self) -> float:
        """Return the current reading of the store clock in seconds."""
        ...

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve the entry stored under a key.

        Args:
            key: The cache key to retrieve.

        Returns:
            The stored entry, or None if not found.
        """
        ...

    async def set(self, key: str, value: bytes) -> CacheEntry:
        """Store a value, replacing any entry already under the key.

        Args:
            key: The cache key.
            value: The raw response body to store.

        Returns:
            The new entry, stamped with the store clock.
        """
        ...

    async def delete(self, key: str) -> bool:
        """Delete the entry under a key.

        Args:
            key: The cache key to delete.

        Returns:
            True if the key existed and was deleted, False otherwise.
        """
        ...

    async def clear(self) -> None:
        """Remove every entry."""
        ...
