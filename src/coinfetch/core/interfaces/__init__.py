"""Core interfaces (Protocol classes) for coinfetch."""

from coinfetch.core.interfaces.cache_store import ICacheStore
from coinfetch.core.interfaces.key_builder import IKeyBuilder
from coinfetch.core.interfaces.serializer import ISerializer
from coinfetch.core.interfaces.transport import ITransport

__all__ = [
    "ICacheStore",
    "IKeyBuilder",
    "ISerializer",
    "ITransport",
]
