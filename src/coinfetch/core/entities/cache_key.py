"""Cache key value object."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheKey:
    """Immutable cache key value object.

    Encapsulates the logical identity of an upstream request: the
    normalized endpoint plus a hash of its canonicalized parameters.
    """

    prefix: str
    endpoint: str
    params_hash: str | None = None

    def __str__(self) -> str:
        """Return the full cache key string.

        Returns:
            The complete cache key as a string.
        """
        parts = [self.prefix, self.endpoint]
        if self.params_hash:
            parts.append(f"p:{self.params_hash}")
        return ":".join(parts)

    @classmethod
    def from_components(
        cls,
        prefix: str,
        endpoint: str,
        parameters: Mapping[str, Any] | None,
        hash_func: Callable[[Any], str] | None = None,
    ) -> "CacheKey":
        """Create a CacheKey from raw request components.

        Empty and missing parameter mappings produce the same key.

        Args:
            prefix: Cache key prefix.
            endpoint: The logical resource path.
            parameters: Query parameters of the request.
            hash_func: Optional custom hash function.

        Returns:
            A new CacheKey instance.
        """
        from coinfetch.utils.hashing import hash_value, normalize_endpoint

        hasher = hash_func or hash_value

        return cls(
            prefix=prefix,
            endpoint=normalize_endpoint(endpoint),
            params_hash=hasher(dict(parameters)) if parameters else None,
        )
