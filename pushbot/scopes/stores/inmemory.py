"""In-memory implementation of ScopeStore."""

import time
from collections.abc import Callable

from pushbot.config.models.storage import DEFAULT_SCOPE_TTL_SECONDS
from pushbot.domain.scope import Scope
from pushbot.scopes.store import ScopeStore


class InMemoryScopeStore(ScopeStore):
    """In-memory implementation of ScopeStore for testing and development.

    Entries hold the serialized scope and an expiry deadline taken from
    ``clock``. Expired entries are evicted lazily on read or by
    purge_expired(). Not shared across processes.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_SCOPE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize empty storage.

        Args:
            ttl_seconds: Time-to-live applied on every put
            clock: Monotonic time source in seconds
        """
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, str]] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    async def get(self, conversation_id: str, from_participant: str) -> Scope | None:
        """Get a scope, or None if absent or expired."""
        key = self.scope_key(conversation_id, from_participant)
        entry = self._entries.get(key)
        if entry is None:
            return None

        expires_at, data = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None

        scope = self.decode(key, data)
        if scope is None:
            del self._entries[key]
        return scope

    async def put(self, scope: Scope) -> None:
        """Insert or replace a scope, refreshing its TTL."""
        data = self.encode(scope)
        self._entries[scope.key] = (self._clock() + self._ttl, data)

    async def delete(self, conversation_id: str, from_participant: str) -> bool:
        """Delete a scope. Returns True if one was present."""
        key = self.scope_key(conversation_id, from_participant)
        return self._entries.pop(key, None) is not None

    def purge_expired(self) -> int:
        """Evict all expired entries, returning how many were removed."""
        now = self._clock()
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        now = self._clock()
        return sum(1 for expires_at, _ in self._entries.values() if expires_at > now)
