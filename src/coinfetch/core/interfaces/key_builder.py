"""Key builder interface."""

from collections.abc import Mapping
from typing import Any, Protocol


class IKeyBuilder(Protocol):
    """Contract for building cache keys from request identity.

    Key builders must be deterministic and insensitive to the order
    in which parameters were inserted.
    """

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
            A string key identifying the request.
        """
        ...
