"""Domain models: chat events, scopes and outbound messages."""

from pushbot.domain.events import (
    MEMBERSHIP_KINDS,
    ChatAccept,
    ChatEvent,
    ChatEventKind,
    ChatMessage,
    ChatReject,
    ChatRequest,
    EventOrigin,
    MessagePayload,
    MessageType,
    ParticipantJoined,
    ParticipantLeft,
    ParticipantRemoved,
    RawProof,
    SignedProof,
    parse_chat_event,
)
from pushbot.domain.messages import DeliveryResult, OutboundMessage
from pushbot.domain.scope import Scope, scope_key

__all__ = [
    # Events
    "MEMBERSHIP_KINDS",
    "ChatAccept",
    "ChatEvent",
    "ChatEventKind",
    "ChatMessage",
    "ChatReject",
    "ChatRequest",
    "EventOrigin",
    "MessagePayload",
    "MessageType",
    "ParticipantJoined",
    "ParticipantLeft",
    "ParticipantRemoved",
    "RawProof",
    "SignedProof",
    "parse_chat_event",
    # Messages
    "DeliveryResult",
    "OutboundMessage",
    # Scope
    "Scope",
    "scope_key",
]
