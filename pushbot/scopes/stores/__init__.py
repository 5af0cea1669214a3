"""Scope store implementations."""

from pushbot.scopes.stores.inmemory import InMemoryScopeStore
from pushbot.scopes.stores.redis import RedisScopeStore

__all__ = [
    "InMemoryScopeStore",
    "RedisScopeStore",
]
