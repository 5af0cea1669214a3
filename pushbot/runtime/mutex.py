"""Per-key mutual exclusion for scope processing.

Ensures only one turn runs per conversation and participant at a time,
while turns for different keys proceed in parallel.

KeyedMutex serializes turns inside one process. Several bot processes
sharing a Redis scope store need RedisKeyedMutex, which adds a Redis lock
on top of the local one.
"""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from redis.asyncio import Redis
from redis.exceptions import LockError, RedisError

from pushbot.errors import ScopeLockTimeoutError, StoreUnavailableError
from pushbot.observability.logging import get_logger

logger = get_logger(__name__)


class KeyedMutex:
    """In-process lock keyed by scope key.

    Locks are created on first use and dropped once nobody holds or waits
    for them. ``asyncio.Lock`` wakes waiters in FIFO order, so callers that
    reach acquire() in arrival order are served in arrival order.

    Only turns within this process are serialized; see RedisKeyedMutex
    for deployments running more than one bot process.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def acquire(self, key: str) -> AsyncGenerator[None, None]:
        """Hold the lock for ``key`` for the duration of the block.

        Usage:
            async with mutex.acquire("conversation:participant"):
                # load, handle, persist
        """
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1

        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def is_locked(self, key: str) -> bool:
        """Check if a key is currently held."""
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        """Number of keys currently held or awaited."""
        return len(self._locks)


class RedisKeyedMutex(KeyedMutex):
    """Redis-backed lock for scope keys shared by several processes.

    The local FIFO lock is taken first, so arrival order still holds within
    a process and each process queues at most one waiter per key on Redis.
    Across processes Redis grants the lock in no particular order.

    Lock key format: {key_prefix}:{conversation_id}:{from_participant}
    """

    def __init__(
        self,
        client: Redis,
        lock_timeout: int = 30,
        blocking_timeout: float = 10.0,
        key_prefix: str = "scopelock",
    ) -> None:
        """Initialize the mutex.

        Args:
            client: Redis client instance
            lock_timeout: How long the lock is held before auto-release (seconds)
            blocking_timeout: How long to wait for the lock (seconds)
            key_prefix: Namespace for lock keys
        """
        super().__init__()
        self._client = client
        self._lock_timeout = lock_timeout
        self._blocking_timeout = blocking_timeout
        self._prefix = key_prefix

    def _lock_key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    @asynccontextmanager
    async def acquire(self, key: str) -> AsyncGenerator[None, None]:
        """Hold both the local and the Redis lock for ``key``.

        Raises:
            ScopeLockTimeoutError: If the Redis lock was not granted in time
            StoreUnavailableError: If Redis cannot be reached
        """
        async with super().acquire(key):
            lock = self._client.lock(
                self._lock_key(key),
                timeout=self._lock_timeout,
                blocking_timeout=self._blocking_timeout,
            )
            try:
                acquired = await lock.acquire()
            except RedisError as e:
                logger.error("scope_lock_error", key=key, error=str(e))
                raise StoreUnavailableError(f"Failed to lock scope: {e}", cause=e) from e

            if not acquired:
                logger.warning(
                    "scope_lock_timeout",
                    key=key,
                    blocking_timeout=self._blocking_timeout,
                )
                raise ScopeLockTimeoutError(f"Timed out waiting for scope lock {key}")

            try:
                yield
            finally:
                try:
                    await lock.release()
                except LockError as e:
                    # Expired after lock_timeout; another process may hold it now
                    logger.warning("scope_lock_expired", key=key, error=str(e))
