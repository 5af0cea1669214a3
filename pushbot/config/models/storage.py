"""Scope store configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

ScopeBackendType = Literal["inmemory", "redis"]

DEFAULT_SCOPE_TTL_SECONDS = 3600


class ScopeStoreConfig(BaseModel):
    """Configuration for the scope store backend."""

    backend: ScopeBackendType = Field(
        default="inmemory",
        description="Backend type",
    )
    ttl_seconds: int = Field(
        default=DEFAULT_SCOPE_TTL_SECONDS,
        gt=0,
        description="Scope time-to-live, refreshed on every write (seconds)",
    )
    connection_url: str | None = Field(
        default=None,
        description="Connection URL (from env var)",
    )
    key_prefix: str | None = Field(
        default=None,
        description="Optional prefix prepended to scope keys",
    )
