"""Configuration model exports.

    from pushbot.config.models import ScopeStoreConfig, StreamConfig
"""

from pushbot.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)
from pushbot.config.models.processor import ProcessorConfig, RoutingPolicy
from pushbot.config.models.storage import DEFAULT_SCOPE_TTL_SECONDS, ScopeStoreConfig
from pushbot.config.models.stream import StreamConfig

__all__ = [
    # Observability
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    # Processor
    "ProcessorConfig",
    "RoutingPolicy",
    # Storage
    "DEFAULT_SCOPE_TTL_SECONDS",
    "ScopeStoreConfig",
    # Stream
    "StreamConfig",
]
