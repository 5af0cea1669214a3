"""ScopeStore abstract interface."""

from abc import ABC, abstractmethod
from types import TracebackType

from pydantic import ValidationError

from pushbot.domain.scope import Scope, scope_key
from pushbot.errors import ScopeSerializationError
from pushbot.observability.logging import get_logger
from pushbot.observability.metrics import STORE_ERRORS

logger = get_logger(__name__)


class ScopeStore(ABC):
    """Abstract interface for scope storage.

    Scopes are stored under ``conversation_id:from_participant`` with a
    time-to-live refreshed on every write. Expiry is the backend's job;
    an expired scope simply reads as absent.

    Implementations store a serialized copy, so a scope returned by get()
    never shares state with one passed to put().

    A stored value that no longer decodes (foreign data, or a scope
    written before a model change) reads as absent and is evicted.
    """

    @staticmethod
    def scope_key(conversation_id: str, from_participant: str) -> str:
        """Build the storage key for a conversation and participant."""
        return scope_key(conversation_id, from_participant)

    @staticmethod
    def encode(scope: Scope) -> str:
        """Serialize a scope for storage.

        Raises:
            ScopeSerializationError: If handler_data holds a value JSON
                cannot represent
        """
        try:
            return scope.model_dump_json()
        except ValueError as e:
            # PydanticSerializationError is a ValueError, as are circular references
            STORE_ERRORS.labels(operation="encode").inc()
            logger.error("scope_encode_failed", key=scope.key, error=str(e))
            raise ScopeSerializationError(
                f"Scope {scope.key} is not serializable: {e}",
                key=scope.key,
                cause=e,
            ) from e

    @staticmethod
    def decode(key: str, data: str | bytes) -> Scope | None:
        """Deserialize a stored scope, or None if it no longer validates."""
        try:
            return Scope.model_validate_json(data)
        except ValidationError as e:
            STORE_ERRORS.labels(operation="decode").inc()
            logger.warning(
                "scope_decode_failed",
                key=key,
                error_count=e.error_count(),
            )
            return None

    async def open(self) -> None:
        """Prepare backend resources."""
        pass

    async def close(self) -> None:
        """Release backend resources."""
        pass

    async def __aenter__(self) -> "ScopeStore":
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    @abstractmethod
    async def get(self, conversation_id: str, from_participant: str) -> Scope | None:
        """Get a scope, or None if absent or expired."""
        pass

    @abstractmethod
    async def put(self, scope: Scope) -> None:
        """Insert or replace a scope, refreshing its TTL."""
        pass

    @abstractmethod
    async def delete(self, conversation_id: str, from_participant: str) -> bool:
        """Delete a scope. Returns True if one was present."""
        pass
