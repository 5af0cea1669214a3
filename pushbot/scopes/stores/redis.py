"""Redis implementation of ScopeStore.

Each scope is one string key holding the scope JSON, written with SETEX
so Redis enforces the TTL.
"""

import redis.asyncio as redis

from pushbot.config.models.storage import DEFAULT_SCOPE_TTL_SECONDS
from pushbot.domain.scope import Scope
from pushbot.errors import StoreUnavailableError
from pushbot.observability.logging import get_logger
from pushbot.observability.metrics import STORE_ERRORS
from pushbot.scopes.store import ScopeStore

logger = get_logger(__name__)


class RedisScopeStore(ScopeStore):
    """Redis implementation of ScopeStore.

    Key structure:
    - {conversation_id}:{from_participant}
    - {key_prefix}:{conversation_id}:{from_participant} when a prefix is set
    """

    def __init__(
        self,
        client: redis.Redis,
        ttl_seconds: int = DEFAULT_SCOPE_TTL_SECONDS,
        key_prefix: str | None = None,
    ) -> None:
        """Initialize Redis scope store.

        Args:
            client: Redis client instance
            ttl_seconds: Time-to-live applied on every put
            key_prefix: Optional namespace for scope keys
        """
        self._client = client
        self._ttl = ttl_seconds
        self._prefix = key_prefix

    @classmethod
    def from_url(
        cls,
        url: str,
        ttl_seconds: int = DEFAULT_SCOPE_TTL_SECONDS,
        key_prefix: str | None = None,
    ) -> "RedisScopeStore":
        """Create a store with its own client connected to ``url``."""
        client = redis.Redis.from_url(url, decode_responses=True)
        logger.info(
            "redis_client_created",
            url=url.split("@")[-1] if "@" in url else url,  # Redact auth
        )
        return cls(client, ttl_seconds=ttl_seconds, key_prefix=key_prefix)

    @property
    def client(self) -> redis.Redis:
        return self._client

    def _key(self, conversation_id: str, from_participant: str) -> str:
        """Build Redis key for a scope."""
        key = self.scope_key(conversation_id, from_participant)
        return f"{self._prefix}:{key}" if self._prefix else key

    async def get(self, conversation_id: str, from_participant: str) -> Scope | None:
        """Get a scope, or None if absent or expired."""
        key = self._key(conversation_id, from_participant)
        try:
            data = await self._client.get(key)
        except redis.RedisError as e:
            STORE_ERRORS.labels(operation="get").inc()
            logger.error("redis_get_error", key=key, error=str(e))
            raise StoreUnavailableError(f"Failed to get scope: {e}", cause=e) from e

        if data is None:
            logger.debug("scope_not_found", key=key)
            return None

        scope = self.decode(key, data)
        if scope is None:
            await self._evict(key)
        return scope

    async def put(self, scope: Scope) -> None:
        """Insert or replace a scope, refreshing its TTL."""
        key = self._key(scope.conversation_id, scope.from_participant)
        data = self.encode(scope)
        try:
            await self._client.setex(key, self._ttl, data)
        except redis.RedisError as e:
            STORE_ERRORS.labels(operation="put").inc()
            logger.error("redis_put_error", key=key, error=str(e))
            raise StoreUnavailableError(f"Failed to store scope: {e}", cause=e) from e

        logger.debug("scope_stored", key=key, ttl_seconds=self._ttl)

    async def delete(self, conversation_id: str, from_participant: str) -> bool:
        """Delete a scope. Returns True if one was present."""
        key = self._key(conversation_id, from_participant)
        try:
            deleted = await self._client.delete(key)
        except redis.RedisError as e:
            STORE_ERRORS.labels(operation="delete").inc()
            logger.error("redis_delete_error", key=key, error=str(e))
            raise StoreUnavailableError(f"Failed to delete scope: {e}", cause=e) from e

        return deleted > 0

    async def _evict(self, key: str) -> None:
        """Remove a value that no longer decodes as a scope."""
        try:
            await self._client.delete(key)
        except redis.RedisError as e:
            STORE_ERRORS.labels(operation="delete").inc()
            logger.error("redis_delete_error", key=key, error=str(e))
            raise StoreUnavailableError(f"Failed to evict scope: {e}", cause=e) from e
        logger.info("undecodable_scope_evicted", key=key)

    async def close(self) -> None:
        """Close the Redis client."""
        await self._client.aclose()

    async def health_check(self) -> bool:
        """Check Redis connection health."""
        try:
            await self._client.ping()
            logger.debug("redis_health_check_passed")
            return True
        except redis.RedisError as e:
            logger.warning("redis_health_check_failed", error=str(e))
            return False
