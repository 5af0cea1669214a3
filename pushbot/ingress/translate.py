"""Translation of raw transport events into ChatEvent models.

The transport delivers events as mappings shaped like::

    {
        "event": "chat.message",
        "origin": "other",
        "timestamp": "1700000000000",
        "chatId": "...",
        "from": "eip155:0x...",
        "to": ["eip155:0x..."],
        "message": {"type": "Text", "content": "/ping"},
        "meta": {"group": false},
        "reference": "...",
        "raw": {"fromCAIP10": "...", "verificationProof": "...", ...},
    }
"""

from collections.abc import Mapping
from typing import Any

from pushbot.domain.events import (
    MEMBERSHIP_KINDS,
    ChatEvent,
    ChatEventKind,
    parse_chat_event,
)
from pushbot.errors import UnsupportedEventError

STREAM_EVENT_KINDS: dict[str, ChatEventKind] = {
    "chat.message": ChatEventKind.MESSAGE,
    "chat.request": ChatEventKind.REQUEST,
    "chat.accept": ChatEventKind.ACCEPT,
    "chat.reject": ChatEventKind.REJECT,
    "chat.group.participant.remove": ChatEventKind.PARTICIPANT_REMOVED,
    "chat.group.participant.join": ChatEventKind.PARTICIPANT_JOINED,
    "chat.group.participant.leave": ChatEventKind.PARTICIPANT_LEFT,
}

RAW_PROOF_FIELDS: dict[str, str] = {
    "fromCAIP10": "from_caip10",
    "toCAIP10": "to_caip10",
    "fromDID": "from_did",
    "toDID": "to_did",
    "encType": "enc_type",
    "encryptedSecret": "encrypted_secret",
    "signature": "signature",
    "sigType": "sig_type",
    "verificationProof": "verification_proof",
    "previousReference": "previous_reference",
}


def _raw_proof(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {
        field: raw[name]
        for name, field in RAW_PROOF_FIELDS.items()
        if raw.get(name) is not None
    }


def translate_stream_event(data: Mapping[str, Any]) -> ChatEvent:
    """Build the ChatEvent for a raw transport event.

    Raises:
        UnsupportedEventError: If the event name is not a chat event
        pydantic.ValidationError: If required fields are missing
    """
    name = data.get("event")
    kind = STREAM_EVENT_KINDS.get(name) if isinstance(name, str) else None
    if kind is None:
        raise UnsupportedEventError(f"Unsupported stream event: {name!r}")

    meta = data.get("meta") or {}
    fields: dict[str, Any] = {
        "kind": kind.value,
        "origin": data.get("origin"),
        "timestamp": data.get("timestamp"),
        "conversation_id": data.get("chatId"),
        "from_participant": data.get("from"),
        "group": bool(meta.get("group", False)),
        "raw": _raw_proof(data.get("raw") or {}),
    }

    # Membership events carry no recipients, payload or reference
    if kind not in MEMBERSHIP_KINDS:
        fields["to_participants"] = list(data.get("to") or [])
        fields["reference"] = data.get("reference")
        message = data.get("message")
        if message is not None:
            fields["payload"] = {
                "type": message.get("type"),
                "content": message.get("content"),
            }

    return parse_chat_event(fields)
