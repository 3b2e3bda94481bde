"""Domain entities for coinfetch."""

from coinfetch.core.entities.cache_entry import CacheEntry
from coinfetch.core.entities.cache_key import CacheKey
from coinfetch.core.entities.fetch_config import DEFAULT_BASE_URL, FetchConfig
from coinfetch.core.entities.retry_policy import RetryPolicy

__all__ = [
    "CacheEntry",
    "CacheKey",
    "FetchConfig",
    "RetryPolicy",
    "DEFAULT_BASE_URL",
]
