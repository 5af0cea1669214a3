"""Tests for InMemoryScopeStore."""

import pytest

from pushbot.domain.scope import Scope
from pushbot.errors import ScopeSerializationError, StoreError
from pushbot.scopes.stores import InMemoryScopeStore
from tests.factories.events import ChatEventFactory


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> InMemoryScopeStore:
    """Create a fresh store with a one hour TTL."""
    return InMemoryScopeStore(ttl_seconds=3600, clock=clock)


@pytest.fixture
def sample_scope() -> Scope:
    return Scope.start("c1", ChatEventFactory.message("/survey"))


class TestScopeOperations:
    """Tests for scope CRUD operations."""

    @pytest.mark.asyncio
    async def test_put_and_get(self, store, sample_scope) -> None:
        """Should store and retrieve a scope."""
        await store.put(sample_scope)
        retrieved = await store.get("c1", "alice")

        assert retrieved is not None
        assert retrieved.event_history == sample_scope.event_history

    @pytest.mark.asyncio
    async def test_get_returns_independent_copy(self, store, sample_scope) -> None:
        """Mutating a stored scope after put does not change the stored value."""
        await store.put(sample_scope)
        sample_scope.append(ChatEventFactory.message("red"))
        sample_scope.handler_data["step"] = 2

        retrieved = await store.get("c1", "alice")
        assert len(retrieved.event_history) == 1
        assert retrieved.handler_data == {}

    @pytest.mark.asyncio
    async def test_get_missing(self, store) -> None:
        """Should return None for unknown keys."""
        assert await store.get("c1", "nobody") is None

    @pytest.mark.asyncio
    async def test_put_upserts(self, store, sample_scope) -> None:
        """A second put replaces the first."""
        await store.put(sample_scope)
        sample_scope.append(ChatEventFactory.message("red"))
        await store.put(sample_scope)

        retrieved = await store.get("c1", "alice")
        assert len(retrieved.event_history) == 2
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_delete(self, store, sample_scope) -> None:
        """Should delete a scope."""
        await store.put(sample_scope)

        assert await store.delete("c1", "alice") is True
        assert await store.get("c1", "alice") is None

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, store) -> None:
        """Deleting a missing scope is a no-op."""
        assert await store.delete("c1", "alice") is False
        assert await store.delete("c1", "alice") is False

    @pytest.mark.asyncio
    async def test_keys_are_per_participant(self, store) -> None:
        """Different participants in one conversation do not collide."""
        await store.put(Scope.start("c1", ChatEventFactory.message("/a", from_participant="alice")))
        await store.put(Scope.start("c1", ChatEventFactory.message("/b", from_participant="bob")))

        alice = await store.get("c1", "alice")
        bob = await store.get("c1", "bob")
        assert alice.text == "/a"
        assert bob.text == "/b"


class TestExpiry:
    """Tests for TTL handling."""

    @pytest.mark.asyncio
    async def test_expires_after_ttl(self, store, clock, sample_scope) -> None:
        """A scope untouched for longer than the TTL is gone."""
        await store.put(sample_scope)
        clock.advance(3600)

        assert await store.get("c1", "alice") is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_alive_before_ttl(self, store, clock, sample_scope) -> None:
        await store.put(sample_scope)
        clock.advance(3599)
        assert await store.get("c1", "alice") is not None

    @pytest.mark.asyncio
    async def test_put_refreshes_ttl(self, store, clock, sample_scope) -> None:
        """Every write restarts the TTL."""
        await store.put(sample_scope)
        clock.advance(3000)
        await store.put(sample_scope)
        clock.advance(3000)

        assert await store.get("c1", "alice") is not None

    @pytest.mark.asyncio
    async def test_purge_expired(self, store, clock) -> None:
        """purge_expired removes only expired entries."""
        await store.put(Scope.start("c1", ChatEventFactory.message("/a", from_participant="alice")))
        clock.advance(2000)
        await store.put(Scope.start("c1", ChatEventFactory.message("/b", from_participant="bob")))
        clock.advance(2000)

        assert store.purge_expired() == 1
        assert await store.get("c1", "bob") is not None


class TestLifecycle:
    """Tests for open/close lifecycle."""

    @pytest.mark.asyncio
    async def test_async_context_manager(self, sample_scope) -> None:
        async with InMemoryScopeStore() as store:
            await store.put(sample_scope)
            assert await store.get("c1", "alice") is not None


class Opaque:
    """A value JSON cannot represent."""


class TestScopeEncoding:
    """Tests for values that do not survive serialization."""

    @pytest.mark.asyncio
    async def test_unserializable_handler_data_rejected(self, store, sample_scope) -> None:
        """put() raises a store error and leaves nothing behind."""
        sample_scope.handler_data["obj"] = Opaque()

        with pytest.raises(ScopeSerializationError) as exc_info:
            await store.put(sample_scope)

        assert isinstance(exc_info.value, StoreError)
        assert exc_info.value.key == "c1:alice"
        assert isinstance(exc_info.value.cause, ValueError)
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_failed_put_keeps_previous_value(self, store, sample_scope) -> None:
        await store.put(sample_scope)
        sample_scope.handler_data["obj"] = Opaque()

        with pytest.raises(ScopeSerializationError):
            await store.put(sample_scope)

        retrieved = await store.get("c1", "alice")
        assert retrieved.handler_data == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", ['{"bad": 1}', "not json"])
    async def test_undecodable_entry_evicted(self, store, clock, data) -> None:
        """A value that no longer validates reads as absent and is dropped."""
        store._entries["c1:alice"] = (clock.now + 60, data)

        assert await store.get("c1", "alice") is None
        assert "c1:alice" not in store._entries
