"""Scope model: per-conversation, per-participant command state."""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from pushbot.domain.events import ChatEvent
from pushbot.domain.messages import DeliveryResult, OutboundMessage
from pushbot.errors import ScopeNotBoundError

SendCapability = Callable[[str, OutboundMessage], "asyncio.Task[DeliveryResult]"]


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


def scope_key(conversation_id: str, from_participant: str) -> str:
    """Build the storage key for a conversation and participant."""
    return f"{conversation_id}:{from_participant}"


class Scope(BaseModel):
    """State of one in-progress command for a participant in a conversation.

    The first entry of ``event_history`` is always the event that started
    the command. Handlers read the history, keep their own data in
    ``handler_data`` and set ``terminal`` (or call ``end()``) once the
    command is finished. ``handler_data`` is stored as JSON, so it may only
    hold JSON-serializable values.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    conversation_id: str = Field(..., description="Conversation identifier")
    from_participant: str = Field(..., description="Participant driving the command")
    current_event: ChatEvent = Field(..., description="Most recent event")
    event_history: list[ChatEvent] = Field(
        ..., min_length=1, description="Events of this command, oldest first"
    )
    handler_data: dict[str, Any] = Field(
        default_factory=dict, description="Handler-owned state, JSON-serializable"
    )
    terminal: bool = Field(default=False, description="Command has finished")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    updated_at: datetime = Field(default_factory=utc_now, description="Last turn time")

    _send: SendCapability | None = PrivateAttr(default=None)

    @classmethod
    def start(cls, conversation_id: str, event: ChatEvent) -> "Scope":
        """Create the scope for a command triggered by ``event``."""
        return cls(
            conversation_id=conversation_id,
            from_participant=event.from_participant,
            current_event=event,
            event_history=[event],
        )

    @property
    def key(self) -> str:
        """Storage key of this scope."""
        return scope_key(self.conversation_id, self.from_participant)

    @property
    def trigger(self) -> ChatEvent:
        """The event that started the command."""
        return self.event_history[0]

    @property
    def text(self) -> str | None:
        """Text of the current event, if it is a text message."""
        return getattr(self.current_event, "text", None)

    def append(self, event: ChatEvent) -> None:
        """Record a new turn."""
        self.event_history.append(event)
        self.current_event = event
        self.updated_at = utc_now()

    def end(self) -> None:
        """Mark the command as finished."""
        self.terminal = True

    def bind(self, send: SendCapability) -> None:
        """Attach the send capability for this scope's conversation."""
        self._send = send

    def send(self, message: OutboundMessage | str) -> "asyncio.Task[DeliveryResult]":
        """Send a message to the conversation.

        The returned task is not awaited by the processor; handlers that
        need the delivery result await it themselves.

        Raises:
            ScopeNotBoundError: If no send capability is bound
        """
        if self._send is None:
            raise ScopeNotBoundError(f"Scope {self.key} has no sender bound")
        if isinstance(message, str):
            message = OutboundMessage.text(message)
        return self._send(self.conversation_id, message)
