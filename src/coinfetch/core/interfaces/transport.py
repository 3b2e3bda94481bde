"""Transport interface."""

from collections.abc import Mapping
from typing import Any, Protocol


class ITransport(Protocol):
    """Contract for issuing GET requests to the upstream API.

    Implementations translate every failure into the coinfetch
    error hierarchy so that callers never see client-library errors.
    """

    async def get(
        self,
        endpoint: str,
        parameters: Mapping[str, Any] | None = None,
    ) -> bytes:
        """Issue a GET request.

        Args:
            endpoint: The logical resource path.
            parameters: Query parameters of the request.

        Returns:
            The raw body of a 2xx response.

        Raises:
            NetworkError: If no response was received.
            RateLimited: If the upstream answered 429.
            UpstreamError: If the upstream answered any other non-2xx.
        """
        ...

    async def aclose(self) -> None:
        """Release connections held by the transport."""
        ...
