"""Chat event models.

A ChatEvent is a closed tagged union discriminated by ``kind``. Each
variant carries exactly the fields the transport populates for that kind.
Events are immutable once constructed.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ChatEventKind(str, Enum):
    """What happened in the conversation."""

    MESSAGE = "message"
    REQUEST = "request"
    ACCEPT = "accept"
    REJECT = "reject"
    PARTICIPANT_REMOVED = "participant-removed"
    PARTICIPANT_JOINED = "participant-joined"
    PARTICIPANT_LEFT = "participant-left"


class EventOrigin(str, Enum):
    """Whether the event was produced by the bot itself or someone else."""

    SELF = "self"
    OTHER = "other"


class MessageType(str, Enum):
    """Message content types known to the transport."""

    TEXT = "Text"
    IMAGE = "Image"
    FILE = "File"
    GIF = "GIF"
    MEDIA_EMBED = "MediaEmbed"
    META = "Meta"
    REACTION = "Reaction"
    RECEIPT = "Receipt"
    REPLY = "Reply"
    COMPOSITE = "Composite"
    INTENT = "Intent"
    VIDEO = "Video"
    AUDIO = "Audio"
    PAYMENT = "Payment"


MEMBERSHIP_KINDS: frozenset[ChatEventKind] = frozenset({
    ChatEventKind.PARTICIPANT_REMOVED,
    ChatEventKind.PARTICIPANT_JOINED,
    ChatEventKind.PARTICIPANT_LEFT,
})


class MessagePayload(BaseModel):
    """Message body as delivered by the transport."""

    model_config = ConfigDict(frozen=True)

    type: str | None = Field(..., description="Content type, e.g. 'Text'")
    content: Any = Field(default=None, description="Content, shape depends on type")

    @property
    def is_text(self) -> bool:
        """True when this is a plain text message."""
        return self.type == MessageType.TEXT.value and isinstance(self.content, str)


class RawProof(BaseModel):
    """Verification material attached to an event.

    Only the verification proof is guaranteed; membership and request
    events carry nothing else.
    """

    model_config = ConfigDict(frozen=True)

    verification_proof: str = Field(..., description="Proof over the event")
    from_caip10: str | None = Field(default=None, description="Sender CAIP-10 address")
    to_caip10: str | None = Field(default=None, description="Recipient CAIP-10 address")
    from_did: str | None = Field(default=None, description="Sender DID")
    to_did: str | None = Field(default=None, description="Recipient DID")
    enc_type: str | None = Field(default=None, description="Encryption scheme")
    encrypted_secret: str | None = Field(default=None, description="Wrapped secret")
    signature: str | None = Field(default=None, description="Message signature")
    sig_type: str | None = Field(default=None, description="Signature scheme")
    previous_reference: str | None = Field(
        default=None, description="Reference to previous message"
    )


class SignedProof(RawProof):
    """Full verification material carried by message-like events."""

    from_caip10: str
    to_caip10: str
    from_did: str
    to_did: str
    enc_type: str
    signature: str
    sig_type: str


class _ChatEventBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    origin: EventOrigin = Field(..., description="Who produced the event")
    timestamp: int = Field(..., description="Milliseconds since epoch")
    conversation_id: str = Field(..., description="Conversation identifier")
    from_participant: str = Field(..., description="Sender identifier")
    group: bool = Field(default=False, description="Whether the chat is a group")


class ChatMessage(_ChatEventBase):
    """A message sent into the conversation."""

    kind: Literal["message"] = "message"
    to_participants: list[str] = Field(default_factory=list)
    payload: MessagePayload
    reference: str | None = None
    raw: SignedProof

    @property
    def text(self) -> str | None:
        """Message text if this is a text message, otherwise None."""
        return self.payload.content if self.payload.is_text else None


class ChatRequest(_ChatEventBase):
    """A request to open a conversation with the bot."""

    kind: Literal["request"] = "request"
    to_participants: list[str] = Field(default_factory=list)
    payload: MessagePayload | None = None
    reference: str | None = None
    raw: RawProof


class ChatAccept(_ChatEventBase):
    """A conversation request was accepted."""

    kind: Literal["accept"] = "accept"
    to_participants: list[str] = Field(default_factory=list)
    payload: MessagePayload
    reference: str | None = None
    raw: SignedProof


class ChatReject(_ChatEventBase):
    """A conversation request was rejected."""

    kind: Literal["reject"] = "reject"
    to_participants: list[str] = Field(default_factory=list)
    payload: MessagePayload = Field(
        default_factory=lambda: MessagePayload(type=None, content=None)
    )
    reference: str | None = None
    raw: SignedProof


class _MembershipEventBase(_ChatEventBase):
    to_participants: None = None
    payload: None = None
    reference: None = None
    raw: RawProof


class ParticipantRemoved(_MembershipEventBase):
    """A participant was removed from a group."""

    kind: Literal["participant-removed"] = "participant-removed"


class ParticipantJoined(_MembershipEventBase):
    """A participant joined a group."""

    kind: Literal["participant-joined"] = "participant-joined"


class ParticipantLeft(_MembershipEventBase):
    """A participant left a group."""

    kind: Literal["participant-left"] = "participant-left"


ChatEvent = Annotated[
    Union[
        ChatMessage,
        ChatRequest,
        ChatAccept,
        ChatReject,
        ParticipantRemoved,
        ParticipantJoined,
        ParticipantLeft,
    ],
    Field(discriminator="kind"),
]

_chat_event_adapter: TypeAdapter[ChatEvent] = TypeAdapter(ChatEvent)


def parse_chat_event(data: Any) -> ChatEvent:
    """Validate a mapping into the matching ChatEvent variant.

    Raises:
        pydantic.ValidationError: If the kind is unknown or fields do not
            fit the variant.
    """
    return _chat_event_adapter.validate_python(data)
