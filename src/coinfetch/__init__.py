"""coinfetch - Resilient cached access to rate-limited market-data APIs.

A Python library wrapping upstream HTTP GETs with a TTL cache keyed by
request identity and bounded retry on HTTP 429, plus exponential
backoff for uncached calls, a CoinGecko-style market-data client,
per-account watchlists and an optional FastAPI proxy.

Example:
    from coinfetch import FetchConfig, MarketDataClient, ResilientFetchCache

    config = FetchConfig(api_key="CG-...")

    async with ResilientFetchCache.from_config(config) as cache:
        market = MarketDataClient(cache)
        coins = await market.fetch_coins(limit=50)
        bitcoin = await market.get_coin_details("bitcoin")

        # Served from cache, no second request
        coins = await market.fetch_coins(limit=50)

Retrying uncached calls:
    from coinfetch import retry_with_backoff

    data = await retry_with_backoff(load_contract_state, max_attempts=3)
"""

__version__ = "0.1.0"

from coinfetch.core.entities import CacheEntry, CacheKey, FetchConfig, RetryPolicy
from coinfetch.core.exceptions import (
    FetchError,
    InvalidResponse,
    NetworkError,
    RateLimited,
    UpstreamError,
)
from coinfetch.core.interfaces import (
    ICacheStore,
    IKeyBuilder,
    ISerializer,
    ITransport,
)
from coinfetch.core.services import (
    ResilientFetchCache,
    retry_with_backoff,
    retry_with_policy,
)
from coinfetch.decorators import with_backoff
from coinfetch.infrastructure import (
    DefaultKeyBuilder,
    HttpxTransport,
    InMemoryCacheStore,
    JsonSerializer,
)
from coinfetch.market import MarketDataClient
from coinfetch.watchlist import JsonFileStorage, WatchlistStore

__all__ = [
    # Version
    "__version__",
    # Core entities
    "CacheEntry",
    "CacheKey",
    "FetchConfig",
    "RetryPolicy",
    # Errors
    "FetchError",
    "NetworkError",
    "RateLimited",
    "UpstreamError",
    "InvalidResponse",
    # Core interfaces
    "ICacheStore",
    "IKeyBuilder",
    "ISerializer",
    "ITransport",
    # Core services
    "ResilientFetchCache",
    "retry_with_backoff",
    "retry_with_policy",
    # Infrastructure implementations
    "InMemoryCacheStore",
    "DefaultKeyBuilder",
    "JsonSerializer",
    "HttpxTransport",
    # Decorators
    "with_backoff",
    # Market data and watchlists
    "MarketDataClient",
    "WatchlistStore",
    "JsonFileStorage",
]
