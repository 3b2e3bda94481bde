"""Cache store implementations."""

from coinfetch.infrastructure.stores.memory import InMemoryCacheStore

__all__ = ["InMemoryCacheStore"]
