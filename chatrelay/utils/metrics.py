"""
Prometheus metrics for the relay.

A private registry keeps the collectors isolated so that several app
instances (as created by the test-suite) do not clash on the default
registry.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    generate_latest,
)

from chatrelay.utils.logger import get_logger

logger = get_logger(__name__)


class RelayMetrics:
    """Counters for webhook intake, NLU queries and Send API calls."""

    def __init__(self):
        self.registry = CollectorRegistry()

        self.webhook_events = Counter(
            "chat_relay_webhook_events_total",
            "Messaging events received by the webhook",
            ["outcome"],
            registry=self.registry
        )

        self.nlu_queries = Counter(
            "chat_relay_nlu_queries_total",
            "Queries sent to the NLU provider",
            ["backend", "outcome"],
            registry=self.registry
        )

        self.send_api_calls = Counter(
            "chat_relay_send_api_calls_total",
            "Calls made to the Messenger Send API",
            ["kind", "outcome"],
            registry=self.registry
        )

    def record_webhook_event(self, outcome: str) -> None:
        self.webhook_events.labels(outcome=outcome).inc()

    def record_nlu_query(self, backend: str, success: bool) -> None:
        self.nlu_queries.labels(
            backend=backend,
            outcome="success" if success else "failure"
        ).inc()

    def record_send(self, kind: str, success: bool) -> None:
        self.send_api_calls.labels(
            kind=kind,
            outcome="success" if success else "failure"
        ).inc()

    def render(self) -> bytes:
        """Render all collectors in the Prometheus text format."""
        return generate_latest(self.registry)

    @property
    def content_type(self) -> str:
        return CONTENT_TYPE_LATEST
