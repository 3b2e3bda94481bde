"""Core domain layer for coinfetch."""

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

__all__ = [
    # Entities
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
    # Interfaces
    "ICacheStore",
    "IKeyBuilder",
    "ISerializer",
    "ITransport",
    # Services
    "ResilientFetchCache",
    "retry_with_backoff",
    "retry_with_policy",
]
