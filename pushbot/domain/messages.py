"""Outbound message and delivery models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pushbot.domain.events import MessageType


class OutboundMessage(BaseModel):
    """Message the bot sends into a conversation."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(default=MessageType.TEXT.value, description="Content type")
    content: Any = Field(..., description="Content, shape depends on type")

    @classmethod
    def text(cls, content: str) -> "OutboundMessage":
        """Build a plain text message."""
        return cls(type=MessageType.TEXT.value, content=content)


class DeliveryResult(BaseModel):
    """Result of sending a message through the transport."""

    success: bool = Field(..., description="Whether the transport accepted it")
    message_id: str | None = Field(
        default=None, description="Transport-assigned message identifier"
    )
    error_message: str | None = Field(default=None, description="Failure reason")
