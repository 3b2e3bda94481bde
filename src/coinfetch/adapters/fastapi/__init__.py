"""FastAPI adapter for coinfetch."""

from coinfetch.adapters.fastapi.app import create_app, main
from coinfetch.adapters.fastapi.config import ServerConfig
from coinfetch.adapters.fastapi.middleware import RateLimitMiddleware

__all__ = [
    "create_app",
    "main",
    "ServerConfig",
    "RateLimitMiddleware",
]
