"""Domain services for coinfetch."""

from coinfetch.core.services.fetch_cache import ResilientFetchCache
from coinfetch.core.services.retry import retry_with_backoff, retry_with_policy

__all__ = [
    "ResilientFetchCache",
    "retry_with_backoff",
    "retry_with_policy",
]
