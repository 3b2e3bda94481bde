"""Proxy server configuration."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any


@dataclass
class ServerConfig:
    """Settings of the proxy server.

    ``proxy_url`` is the generic upstream behind ``/api/data``; calls to
    it are retried with exponential backoff. Each client host may issue
    ``rate_limit_max`` requests per ``rate_limit_window``.
    """

    host: str = "127.0.0.1"
    port: int = 3000

    proxy_url: str = "https://api.example.com/data"
    proxy_retry_attempts: int = 3
    proxy_retry_delay: float = 0.3

    rate_limit_max: int = 100
    rate_limit_window: timedelta = timedelta(minutes=15)

    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    watchlist_path: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServerConfig":
        """Build a configuration from environment variables.

        Reads ``HOST``, ``PORT``, ``COINFETCH_PROXY_URL``,
        ``COINFETCH_RATE_LIMIT_MAX``, ``COINFETCH_RATE_LIMIT_WINDOW``
        (seconds), ``COINFETCH_CORS_ORIGINS`` (comma separated) and
        ``COINFETCH_WATCHLIST_PATH``.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, Any] = {}

        if "HOST" in env:
            kwargs["host"] = env["HOST"]
        if "PORT" in env:
            kwargs["port"] = int(env["PORT"])
        if "COINFETCH_PROXY_URL" in env:
            kwargs["proxy_url"] = env["COINFETCH_PROXY_URL"]
        if "COINFETCH_RATE_LIMIT_MAX" in env:
            kwargs["rate_limit_max"] = int(env["COINFETCH_RATE_LIMIT_MAX"])
        if "COINFETCH_RATE_LIMIT_WINDOW" in env:
            kwargs["rate_limit_window"] = timedelta(
                seconds=float(env["COINFETCH_RATE_LIMIT_WINDOW"])
            )
        if "COINFETCH_CORS_ORIGINS" in env:
            kwargs["cors_origins"] = [
                origin.strip()
                for origin in env["COINFETCH_CORS_ORIGINS"].split(",")
                if origin.strip()
            ]
        if "COINFETCH_WATCHLIST_PATH" in env:
            kwargs["watchlist_path"] = env["COINFETCH_WATCHLIST_PATH"] or None

        return cls(**kwargs)
