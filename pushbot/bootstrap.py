"""Bootstrap module for running a bot from configuration.

Handles:
- Loading configuration from TOML files and environment
- Configuring structured logging
- Starting the metrics exporter
- Creating the scope store and the PushBot

Example usage:

    from pushbot.bootstrap import bootstrap

    bot = bootstrap(client)

    @bot.command(r"^/ping$")
    def ping(scope):
        scope.send("Pong!")
        scope.end()

    await bot.start()
"""

from pushbot.bot import PushBot
from pushbot.config import get_settings
from pushbot.config.settings import Settings
from pushbot.ingress.transport import ChatClient
from pushbot.observability.logging import get_logger, setup_logging
from pushbot.observability.metrics import setup_metrics
from pushbot.scopes import create_scope_store

logger = get_logger(__name__)


def bootstrap(client: ChatClient, settings: Settings | None = None) -> PushBot:
    """Build a PushBot with logging and metrics configured.

    Args:
        client: Chat network client
        settings: Configuration (loaded with get_settings() if not provided)

    Returns:
        A bot ready to have commands registered and be started
    """
    settings = settings or get_settings()
    log_config = settings.observability.logging
    setup_logging(
        level=log_config.level,
        format=log_config.format,
        redact_pii=log_config.redact_pii,
    )

    metrics_enabled = setup_metrics(settings.observability.metrics)

    bot = PushBot(client, store=create_scope_store(settings.scopes), settings=settings)
    logger.info(
        "bot_bootstrapped",
        app_name=settings.app_name,
        scope_backend=settings.scopes.backend,
        routing_policy=settings.processor.routing_policy.value,
        metrics_enabled=metrics_enabled,
    )
    return bot
