"""Session processor configuration models."""

from enum import Enum

from pydantic import BaseModel, Field


class RoutingPolicy(str, Enum):
    """Which event decides the command on a continuation turn."""

    ORIGINAL = "original"  # Route on the event that started the command
    CURRENT = "current"  # Route on the newly arrived event


class ProcessorConfig(BaseModel):
    """Session processor configuration."""

    routing_policy: RoutingPolicy = Field(
        default=RoutingPolicy.ORIGINAL,
        description="Event used to resolve the command on continuation turns",
    )
    distributed_lock: bool = Field(
        default=False,
        description="Serialize turns across processes with a Redis lock (redis backend only)",
    )
    lock_timeout_seconds: int = Field(
        default=30,
        gt=0,
        description="Redis lock auto-release time (seconds)",
    )
    lock_wait_seconds: float = Field(
        default=10.0,
        gt=0,
        description="How long a turn waits for the Redis lock (seconds)",
    )
