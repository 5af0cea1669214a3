"""Prometheus metrics for pushbot."""

from prometheus_client import Counter, Histogram, start_http_server

from pushbot.config.models.observability import MetricsConfig

EVENTS_RECEIVED = Counter(
    "pushbot_events_received_total",
    "Chat events received from the stream",
    labelnames=["kind", "origin"],
)

TURNS_PROCESSED = Counter(
    "pushbot_turns_processed_total",
    "Turns processed by the session processor",
    labelnames=["outcome"],
)

TURN_LATENCY = Histogram(
    "pushbot_turn_latency_seconds",
    "Time from lock acquisition to scope persisted or deleted",
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

HANDLER_FAILURES = Counter(
    "pushbot_handler_failures_total",
    "Command handler invocations that raised",
    labelnames=["command"],
)

STORE_ERRORS = Counter(
    "pushbot_store_errors_total",
    "Scope store operations that failed",
    labelnames=["operation"],
)

MESSAGES_SENT = Counter(
    "pushbot_messages_sent_total",
    "Outbound messages by delivery status",
    labelnames=["status"],
)

REQUESTS_ACCEPTED = Counter(
    "pushbot_requests_accepted_total",
    "Chat requests accepted automatically",
)

_server_port: int | None = None


def setup_metrics(config: MetricsConfig) -> bool:
    """Expose metrics over HTTP if enabled.

    The exporter is started at most once per process.

    Returns:
        True if an exporter is serving metrics after the call
    """
    global _server_port

    if not config.enabled:
        return False
    if _server_port is None:
        start_http_server(config.port)
        _server_port = config.port
    return True
