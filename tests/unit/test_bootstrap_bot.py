"""Tests for bootstrap()."""

from unittest.mock import AsyncMock, patch

from pushbot.bootstrap import bootstrap
from pushbot.config.models import MetricsConfig, ObservabilityConfig, ScopeStoreConfig
from pushbot.config.settings import Settings
from pushbot.scopes.stores import InMemoryScopeStore


class TestBootstrap:
    """Tests for building a bot from settings."""

    def test_builds_bot_with_configured_store(self) -> None:
        settings = Settings(
            scopes=ScopeStoreConfig(ttl_seconds=120),
            observability=ObservabilityConfig(metrics=MetricsConfig(enabled=False)),
        )

        with patch("pushbot.bootstrap.setup_logging") as setup_logging:
            bot = bootstrap(AsyncMock(), settings=settings)

        setup_logging.assert_called_once_with(level="INFO", format="json", redact_pii=True)
        assert isinstance(bot.store, InMemoryScopeStore)
        assert bot.store.ttl_seconds == 120

    def test_metrics_exporter_started(self) -> None:
        settings = Settings(
            observability=ObservabilityConfig(metrics=MetricsConfig(enabled=True, port=9555)),
        )

        with (
            patch("pushbot.bootstrap.setup_logging"),
            patch("pushbot.bootstrap.setup_metrics", return_value=True) as setup_metrics,
        ):
            bootstrap(AsyncMock(), settings=settings)

        setup_metrics.assert_called_once_with(settings.observability.metrics)
