"""Session processor.

Governs one conversation and participant across turns. A turn loads the
stored scope, resolves the command, runs its handler and then persists
the scope or deletes it once the command is done.

States per key:
- no scope: only an event matching a command starts one
- active: every event continues the command that matched first
"""

import asyncio
import inspect
import time
from enum import Enum
from typing import Protocol

from pushbot.config.models.processor import RoutingPolicy
from pushbot.domain.events import ChatEvent
from pushbot.domain.messages import DeliveryResult, OutboundMessage
from pushbot.domain.scope import Scope, scope_key
from pushbot.errors import HandlerError
from pushbot.observability.logging import get_logger
from pushbot.observability.metrics import (
    HANDLER_FAILURES,
    MESSAGES_SENT,
    TURN_LATENCY,
    TURNS_PROCESSED,
)
from pushbot.routing.command import Command
from pushbot.routing.router import Router
from pushbot.runtime.mutex import KeyedMutex
from pushbot.scopes.store import ScopeStore

logger = get_logger(__name__)


class TurnOutcome(str, Enum):
    """What a call to process() did with the event."""

    DROPPED = "dropped"  # No scope and no matching command
    ACTIVE = "active"  # Handler ran, scope persisted
    COMPLETED = "completed"  # Handler ran and finished, scope deleted
    ORPHANED = "orphaned"  # Scope existed but no command governs it, scope deleted


class MessageSender(Protocol):
    """Transport capability used to deliver handler messages."""

    async def send(
        self, conversation_id: str, message: OutboundMessage
    ) -> DeliveryResult:
        """Deliver a message to a conversation."""
        ...


class SessionProcessor:
    """Runs command handlers against per-participant scopes.

    Turns for the same conversation and participant are serialized through
    a KeyedMutex held for the whole load, handle, persist sequence.
    """

    def __init__(
        self,
        router: Router,
        store: ScopeStore,
        sender: MessageSender,
        *,
        routing_policy: RoutingPolicy = RoutingPolicy.ORIGINAL,
        mutex: KeyedMutex | None = None,
    ) -> None:
        """Initialize the processor.

        Args:
            router: Registered commands
            store: Scope storage shared by all conversations
            sender: Transport used by scope.send()
            routing_policy: Event that decides the command on continuation turns
            mutex: Per-key lock (a fresh one if not provided)
        """
        self._router = router
        self._store = store
        self._sender = sender
        self._routing_policy = routing_policy
        self._mutex = mutex if mutex is not None else KeyedMutex()
        self._pending_sends: set[asyncio.Task[DeliveryResult]] = set()

    @property
    def routing_policy(self) -> RoutingPolicy:
        return self._routing_policy

    @property
    def mutex(self) -> KeyedMutex:
        return self._mutex

    @property
    def pending_sends(self) -> int:
        """Number of sends not yet finished."""
        return len(self._pending_sends)

    async def process(self, conversation_id: str, event: ChatEvent) -> TurnOutcome:
        """Process one event for its conversation and sender.

        Raises:
            HandlerError: If the handler raised; nothing is persisted
            StoreUnavailableError: If the scope store failed
            ScopeSerializationError: If handler_data cannot be stored
        """
        key = scope_key(conversation_id, event.from_participant)

        async with self._mutex.acquire(key):
            started = time.perf_counter()
            outcome = await self._process_turn(conversation_id, event, key)
            TURN_LATENCY.observe(time.perf_counter() - started)

        TURNS_PROCESSED.labels(outcome=outcome.value).inc()
        return outcome

    async def _process_turn(
        self, conversation_id: str, event: ChatEvent, key: str
    ) -> TurnOutcome:
        logger.debug(
            "processing_event",
            conversation_id=conversation_id,
            from_participant=event.from_participant,
            kind=event.kind,
        )

        scope = await self._store.get(conversation_id, event.from_participant)

        if scope is None:
            command = self._router.route(event)
            if command is None:
                logger.debug("no_command_for_event", key=key)
                return TurnOutcome.DROPPED
            scope = Scope.start(conversation_id, event)
            logger.debug("scope_created", key=key, route=command.route)
        else:
            scope.append(event)
            command = self._router.route(self._routing_event(scope))
            if command is None:
                logger.warning(
                    "continuation_without_command",
                    key=key,
                    history_length=len(scope.event_history),
                    routing_policy=self._routing_policy.value,
                )
                await self._store.delete(conversation_id, event.from_participant)
                return TurnOutcome.ORPHANED

        await self._invoke(command, scope)

        if scope.terminal:
            await self._store.delete(conversation_id, event.from_participant)
            logger.debug("scope_completed", key=key, turns=len(scope.event_history))
            return TurnOutcome.COMPLETED

        await self._store.put(scope)
        logger.debug("scope_stored", key=key, turns=len(scope.event_history))
        return TurnOutcome.ACTIVE

    def _routing_event(self, scope: Scope) -> ChatEvent:
        """Event that decides the command on a continuation turn."""
        if self._routing_policy == RoutingPolicy.CURRENT:
            return scope.current_event
        return scope.trigger

    async def _invoke(self, command: Command, scope: Scope) -> None:
        """Run the handler, awaiting it if it returned an awaitable."""
        scope.bind(self._spawn_send)
        logger.debug("executing_command", key=scope.key, route=command.route)

        try:
            result = command.handler.handle(scope)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            HANDLER_FAILURES.labels(command=command.route).inc()
            logger.error(
                "handler_failed",
                key=scope.key,
                route=command.route,
                error=str(e),
            )
            raise HandlerError(
                f"Handler for {command.route!r} failed: {e}",
                command=command.route,
                key=scope.key,
                cause=e,
            ) from e

    def _spawn_send(
        self, conversation_id: str, message: OutboundMessage
    ) -> asyncio.Task[DeliveryResult]:
        task = asyncio.get_running_loop().create_task(
            self._deliver(conversation_id, message)
        )
        self._pending_sends.add(task)
        task.add_done_callback(self._on_send_done)
        return task

    def _on_send_done(self, task: asyncio.Task[DeliveryResult]) -> None:
        self._pending_sends.discard(task)
        # Failures were logged in _deliver; mark them retrieved
        if not task.cancelled():
            task.exception()

    async def _deliver(
        self, conversation_id: str, message: OutboundMessage
    ) -> DeliveryResult:
        logger.debug(
            "sending_message",
            conversation_id=conversation_id,
            message_type=message.type,
        )
        try:
            result = await self._sender.send(conversation_id, message)
        except Exception as e:
            MESSAGES_SENT.labels(status="error").inc()
            logger.error(
                "message_send_failed",
                conversation_id=conversation_id,
                error=str(e),
            )
            raise

        MESSAGES_SENT.labels(status="delivered" if result.success else "rejected").inc()
        if not result.success:
            logger.warning(
                "message_rejected",
                conversation_id=conversation_id,
                error=result.error_message,
            )
        return result

    async def drain(self) -> None:
        """Wait for all outstanding sends to finish."""
        while self._pending_sends:
            await asyncio.gather(*self._pending_sends, return_exceptions=True)

    def abandon(self) -> None:
        """Cancel all outstanding sends."""
        for task in list(self._pending_sends):
            task.cancel()
