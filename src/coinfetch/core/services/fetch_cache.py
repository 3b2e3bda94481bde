"""Resilient fetch cache - cached, rate-limit aware upstream GETs."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from datetime import timedelta
from types import TracebackType
from typing import Any, cast

from coinfetch.core.entities.fetch_config import FetchConfig
from coinfetch.core.exceptions import InvalidResponse, RateLimited
from coinfetch.core.interfaces.cache_store import ICacheStore
from coinfetch.core.interfaces.key_builder import IKeyBuilder
from coinfetch.core.interfaces.serializer import ISerializer
from coinfetch.core.interfaces.transport import ITransport
from coinfetch.infrastructure.key_builders.default import DefaultKeyBuilder
from coinfetch.infrastructure.serializers.json import JsonSerializer, SerializationError
from coinfetch.infrastructure.stores.memory import InMemoryCacheStore
from coinfetch.utils.hashing import normalize_endpoint

logger = logging.getLogger(__name__)


class ResilientFetchCache:
    """Domain service wrapping upstream GETs with a TTL cache and retry.

    Successful response bodies are stored under a key derived from the
    endpoint and its parameters; a live entry is served without any
    network call. An HTTP 429 answer is retried after a fixed delay
    until the retry budget is spent. Failures are never cached.

    Concurrent calls for the same key are not de-duplicated: each one
    that misses the cache queries the upstream.
    """

    def __init__(
        self,
        transport: ITransport,
        store: ICacheStore | None = None,
        key_builder: IKeyBuilder | None = None,
        serializer: ISerializer | None = None,
        config: FetchConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the fetch cache.

        Args:
            transport: Transport used for upstream GETs.
            store: Cache store. Defaults to an in-memory store sized
                from the configuration.
            key_builder: Key builder. Defaults to DefaultKeyBuilder.
            serializer: Decoder for response bodies. Defaults to JSON.
            config: Optional configuration. Uses defaults if not provided.
            sleep: Awaitable used to wait between rate-limit retries.
        """
        self._config = config or FetchConfig()
        self._transport = transport
        self._store = store if store is not None else InMemoryCacheStore(
            maxsize=self._config.max_entries,
            ttl=self._config.ttl_seconds,
        )
        self._key_builder = key_builder if key_builder is not None else DefaultKeyBuilder(
            prefix=self._config.key_prefix
        )
        self._serializer = serializer if serializer is not None else JsonSerializer()
        self._sleep = sleep

        # Statistics
        self._hits = 0
        self._misses = 0

    @classmethod
    def from_config(cls, config: FetchConfig | None = None) -> "ResilientFetchCache":
        """Build a fetch cache talking to ``config.base_url`` over httpx.

        Args:
            config: Optional configuration. Uses defaults if not provided.

        Returns:
            A new ResilientFetchCache owning its transport.
        """
        from coinfetch.infrastructure.transports.httpx_transport import HttpxTransport

        config = config or FetchConfig()
        transport = HttpxTransport(
            base_url=config.base_url,
            default_params=config.default_params,
            timeout=config.timeout,
        )
        return cls(transport=transport, config=config)

    @property
    def config(self) -> FetchConfig:
        """Get the fetch configuration."""
        return self._config

    @property
    def ttl(self) -> timedelta:
        return cast(timedelta, self._config.cache_ttl)

    @property
    def stats(self) -> dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with hits, misses, and total requests.
        """
        return {
            "hits": self._hits,
            "misses": self._misses,
            "total": self._hits + self._misses,
        }

    def build_key(
        self,
        endpoint: str,
        parameters: Mapping[str, Any] | None = None,
    ) -> str:
        """Return the cache key used for a request."""
        return self._key_builder.build(endpoint, parameters)

    async def fetch_with_cache(
        self,
        endpoint: str,
        parameters: Mapping[str, Any] | None = None,
        retries_remaining: int | None = None,
    ) -> Any:
        """Fetch a decoded JSON body, serving it from cache when live.

        Args:
            endpoint: The logical resource path. Surrounding whitespace
                and slashes are dropped before keying and sending.
            parameters: Query parameters, sent as-is on the GET.
            retries_remaining: Rate-limit retry budget for this call.
                Defaults to ``config.rate_limit_retries``.

        Returns:
            The decoded response body.

        Raises:
            RateLimited: If the upstream is still rate limiting once the
                retry budget is spent.
            NetworkError: If no response was received.
            UpstreamError: If the upstream answered another non-2xx.
            InvalidResponse: If a 2xx body is not valid JSON.
        """
        if retries_remaining is None:
            retries_remaining = self._config.rate_limit_retries
        if retries_remaining < 0:
            raise ValueError("retries_remaining must be >= 0")

        endpoint = normalize_endpoint(endpoint)
        key = self._key_builder.build(endpoint, parameters)

        cached = await self._lookup(key)
        if cached is not None:
            self._hits += 1
            logger.debug("Cache hit for %s", key)
            return self._decode(endpoint, cached)

        self._misses += 1
        logger.debug("Cache miss for %s", key)

        while True:
            try:
                body = await self._transport.get(endpoint, parameters)
            except RateLimited:
                if retries_remaining <= 0:
                    raise
                logger.warning(
                    "Rate limited on %s. Retrying in %.1f seconds (%d retries left)",
                    endpoint,
                    self._config.rate_limit_delay,
                    retries_remaining,
                )
                await self._sleep(self._config.rate_limit_delay)
                retries_remaining -= 1

                # A concurrent call may have stored the response meanwhile.
                cached = await self._lookup(key)
                if cached is not None:
                    return self._decode(endpoint, cached)
                continue

            value = self._decode(endpoint, body)
            await self._store.set(key, body)
            logger.debug("Stored response for %s", key)
            return value

    async def invalidate(
        self,
        endpoint: str,
        parameters: Mapping[str, Any] | None = None,
    ) -> bool:
        """Drop the cached response of a request.

        Returns:
            True if an entry was removed.
        """
        return await self._store.delete(self._key_builder.build(endpoint, parameters))

    async def clear(self) -> None:
        """Clear all cached entries."""
        await self._store.clear()
        self._hits = 0
        self._misses = 0

    async def aclose(self) -> None:
        """Close the transport."""
        await self._transport.aclose()

    async def __aenter__(self) -> "ResilientFetchCache":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def _lookup(self, key: str) -> bytes | None:
        entry = await self._store.get(key)
        if entry is None or not entry.is_fresh(self.ttl, self._store.now()):
            return None
        return entry.value

    def _decode(self, endpoint: str, body: bytes) -> Any:
        try:
            return self._serializer.deserialize(body)
        except SerializationError as e:
            raise InvalidResponse(
                f"GET {endpoint} returned a malformed body: {e}",
                endpoint=endpoint,
            ) from e
