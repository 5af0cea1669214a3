"""Chat stream configuration models."""

from pydantic import BaseModel, Field


class StreamConfig(BaseModel):
    """Event stream configuration."""

    connection_retries: int = Field(
        default=10,
        ge=0,
        description="Reconnection attempts handed to the transport",
    )
    accept_requests: bool = Field(
        default=False,
        description="Automatically accept incoming chat requests",
    )
