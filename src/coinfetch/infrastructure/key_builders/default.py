"""Default key builder implementation."""

from collections.abc import Mapping
from typing import Any

from coinfetch.core.entities.cache_key import CacheKey


class DefaultKeyBuilder:
    """Default key builder using a hash of canonicalized parameters.

    The endpoint stays readable in the key; parameters are serialized
    with sorted keys and hashed with SHA-256, so insertion order never
    changes the key.
    """

    def __init__(self, prefix: str = "coinfetch") -> None:
        """Initialize the key builder.

        Args:
            prefix: Prefix for all cache keys.
        """
        self._prefix = prefix

    def build(
        self,
        endpoint: str,
        parameters: Mapping[str, Any] | None = None,
    ) -> str:
        """Build the cache key for an upstream GET.

        Args:
            endpoint: The logical resource path.
            parameters: Query parameters of the request.

        Returns:
            A key of the form ``<prefix>:<endpoint>[:p:<hash>]``.
        """
        return str(CacheKey.from_components(self._prefix, endpoint, parameters))
