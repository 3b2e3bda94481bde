"""Infrastructure layer implementations for coinfetch."""

from coinfetch.infrastructure.key_builders import DefaultKeyBuilder
from coinfetch.infrastructure.serializers import JsonSerializer, SerializationError
from coinfetch.infrastructure.stores import InMemoryCacheStore
from coinfetch.infrastructure.transports import HttpxTransport

__all__ = [
    "InMemoryCacheStore",
    "DefaultKeyBuilder",
    "JsonSerializer",
    "SerializationError",
    "HttpxTransport",
]
