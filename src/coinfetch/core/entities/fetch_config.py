"""Fetch configuration entity."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

DEFAULT_BASE_URL = "https://api.coingecko.com/api/v3"


@dataclass
class FetchConfig:
    """Configuration for the resilient fetch cache.

    Cache settings:
        ``cache_ttl`` bounds how long a stored response may be served
        (5 minutes by default). ``max_entries`` bounds how many responses
        are held at once; the least recently used one is evicted first.

    Rate-limit settings:
        A 429 answer is retried up to ``rate_limit_retries`` times, waiting
        a fixed ``rate_limit_delay`` seconds between attempts.

    Upstream settings:
        When ``api_key`` is set it is sent on every request as the
        ``api_key_param`` query parameter.
    """

    base_url: str = DEFAULT_BASE_URL
    api_key: str | None = None
    api_key_param: str = "x_cg_demo_api_key"
    timeout: float = 10.0

    cache_ttl: timedelta | None = None
    max_entries: int = 1000
    key_prefix: str = "coinfetch"

    rate_limit_retries: int = 3
    rate_limit_delay: float = 2.0

    def __post_init__(self) -> None:
        """Set default TTL if not provided and validate limits."""
        if self.cache_ttl is None:
            self.cache_ttl = timedelta(minutes=5)
        if self.rate_limit_retries < 0:
            raise ValueError("rate_limit_retries must be >= 0")
        if self.rate_limit_delay < 0:
            raise ValueError("rate_limit_delay must be >= 0")
        if self.max_entries < 1:
            raise ValueError("max_entries must be >= 1")

    @property
    def ttl_seconds(self) -> float:
        """Return the cache TTL in seconds."""
        return cast(timedelta, self.cache_ttl).total_seconds()

    @property
    def default_params(self) -> dict[str, str]:
        """Query parameters sent with every upstream request."""
        if not self.api_key:
            return {}
        return {self.api_key_param: self.api_key}

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "FetchConfig":
        """Build a configuration from ``COINFETCH_*`` environment variables.

        Unset variables keep their defaults. ``COINFETCH_CACHE_TTL`` is
        given in seconds.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Returns:
            A new FetchConfig instance.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, Any] = {}

        if "COINFETCH_BASE_URL" in env:
            kwargs["base_url"] = env["COINFETCH_BASE_URL"]
        if "COINFETCH_API_KEY" in env:
            kwargs["api_key"] = env["COINFETCH_API_KEY"] or None
        if "COINFETCH_TIMEOUT" in env:
            kwargs["timeout"] = float(env["COINFETCH_TIMEOUT"])
        if "COINFETCH_CACHE_TTL" in env:
            kwargs["cache_ttl"] = timedelta(seconds=float(env["COINFETCH_CACHE_TTL"]))
        if "COINFETCH_MAX_ENTRIES" in env:
            kwargs["max_entries"] = int(env["COINFETCH_MAX_ENTRIES"])
        if "COINFETCH_RATE_LIMIT_RETRIES" in env:
            kwargs["rate_limit_retries"] = int(env["COINFETCH_RATE_LIMIT_RETRIES"])
        if "COINFETCH_RATE_LIMIT_DELAY" in env:
            kwargs["rate_limit_delay"] = float(env["COINFETCH_RATE_LIMIT_DELAY"])

        return cls(**kwargs)
