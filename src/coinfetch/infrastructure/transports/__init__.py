"""Upstream transport implementations."""

from coinfetch.infrastructure.transports.httpx_transport import HttpxTransport

__all__ = ["HttpxTransport"]
