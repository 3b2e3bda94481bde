"""httpx-based transport for upstream GET requests."""

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from coinfetch.core.exceptions import NetworkError, RateLimited, UpstreamError

logger = logging.getLogger(__name__)


def _parse_retry_after(value: str | None) -> float | None:
    # Only the delta-seconds form is honoured; HTTP-dates are ignored.
    if value is None:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


class HttpxTransport:
    """Transport issuing GET requests through an ``httpx.AsyncClient``.

    Default query parameters (typically the API key) are attached to
    every request. Client-library failures are mapped onto the
    coinfetch error hierarchy.
    """

    def __init__(
        self,
        base_url: str,
        default_params: Mapping[str, Any] | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            base_url: Root URL that endpoints are resolved against.
            default_params: Query parameters sent with every request.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, e.g. ``httpx.MockTransport``.
        """
        self._client = httpx.AsyncClient(
            base_url=base_url,
            params=dict(default_params or {}),
            timeout=timeout,
            transport=transport,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

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
        try:
            response = await self._client.get(endpoint, params=dict(parameters or {}))
        except httpx.TransportError as e:
            raise NetworkError(f"GET {endpoint} failed: {e}", endpoint=endpoint) from e

        if response.status_code == 429:
            raise RateLimited(
                f"GET {endpoint} was rate limited",
                endpoint=endpoint,
                retry_after=_parse_retry_after(response.headers.get("Retry-After")),
            )

        if not response.is_success:
            raise UpstreamError(
                f"GET {endpoint} returned HTTP {response.status_code}",
                endpoint=endpoint,
                status_code=response.status_code,
                body=response.content,
            )

        logger.debug("GET %s -> %s", endpoint, response.status_code)
        return response.content

    async def aclose(self) -> None:
        """Close the underlying client."""
        await self._client.aclose()
