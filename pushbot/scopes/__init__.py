"""Scope storage.

Usage:
    from pushbot.scopes import create_scope_store

    store = create_scope_store(settings.scopes)
"""

from pushbot.config.models.storage import ScopeStoreConfig
from pushbot.observability.logging import get_logger
from pushbot.scopes.store import ScopeStore
from pushbot.scopes.stores import InMemoryScopeStore, RedisScopeStore

logger = get_logger(__name__)


def create_scope_store(config: ScopeStoreConfig) -> ScopeStore:
    """Create a scope store from configuration.

    Raises:
        ValueError: If the redis backend is selected without a URL
    """
    if config.backend == "redis":
        if not config.connection_url:
            raise ValueError("Scope backend 'redis' requires scopes.connection_url")
        store: ScopeStore = RedisScopeStore.from_url(
            config.connection_url,
            ttl_seconds=config.ttl_seconds,
            key_prefix=config.key_prefix,
        )
    else:
        store = InMemoryScopeStore(ttl_seconds=config.ttl_seconds)

    logger.info("scope_store_created", backend=config.backend, ttl_seconds=config.ttl_seconds)
    return store


__all__ = [
    "InMemoryScopeStore",
    "RedisScopeStore",
    "ScopeStore",
    "create_scope_store",
]
