"""Prometheus metrics helpers for fintola services."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

_ALLOWED_BROKER_OUTCOMES = {"success", "missing_token", "failure"}
_ALLOWED_CYCLE_OUTCOMES = {"completed", "skipped", "failed"}


class MetricsCollector:
    """Collects and exposes core Prometheus metrics for service operations."""

    def __init__(self, *, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.http_request_latency_seconds = Histogram(
            "fintola_http_request_latency_seconds",
            "Latency distribution of API requests.",
            ("route",),
            buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, float("inf")),
            registry=self.registry,
        )
        self.http_requests_total = Counter(
            "fintola_http_requests_total",
            "Total count of API requests.",
            ("route", "method", "status"),
            registry=self.registry,
        )
        self.broker_token_exchange_total = Counter(
            "fintola_broker_token_exchange_total",
            "Broker authorization code exchanges grouped by outcome.",
            ("broker", "outcome"),
            registry=self.registry,
        )
        self.bot_cycles_total = Counter(
            "fintola_bot_cycles_total",
            "Trading bot cycles grouped by outcome.",
            ("outcome",),
            registry=self.registry,
        )
        self.bot_trades_total = Counter(
            "fintola_bot_trades_total",
            "Paper trades executed by the trading bot.",
            ("action",),
            registry=self.registry,
        )

    def observe_request(self, route: str, method: str, status: int, latency_seconds: float) -> None:
        """Record a completed API request."""

        self.http_request_latency_seconds.labels(route=route).observe(latency_seconds)
        self.http_requests_total.labels(route=route, method=method, status=str(status)).inc()

    def record_token_exchange(self, broker: str, outcome: str) -> None:
        label = outcome if outcome in _ALLOWED_BROKER_OUTCOMES else "__other__"
        self.broker_token_exchange_total.labels(broker=broker, outcome=label).inc()

    def record_bot_cycle(self, outcome: str) -> None:
        label = outcome if outcome in _ALLOWED_CYCLE_OUTCOMES else "__other__"
        self.bot_cycles_total.labels(outcome=label).inc()

    def record_bot_trade(self, action: str) -> None:
        self.bot_trades_total.labels(action=action).inc()

    def render(self) -> bytes:
        """Render metrics in Prometheus exposition format."""

        return generate_latest(self.registry)


_DEFAULT_COLLECTOR: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Return the global metrics collector instance."""

    global _DEFAULT_COLLECTOR
    if _DEFAULT_COLLECTOR is None:
        _DEFAULT_COLLECTOR = MetricsCollector()
    return _DEFAULT_COLLECTOR


def configure_metrics_collector(collector: MetricsCollector | None) -> None:
    """Override the global metrics collector for application wiring or tests."""

    global _DEFAULT_COLLECTOR
    _DEFAULT_COLLECTOR = collector
