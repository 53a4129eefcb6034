"""Tests for the Prometheus metrics collector."""

from prometheus_client import CollectorRegistry

from fintola.core.monitoring import MetricsCollector, configure_metrics_collector, get_metrics_collector


def test_observe_request_updates_metrics() -> None:
    registry = CollectorRegistry()
    collector = MetricsCollector(registry=registry)

    collector.observe_request("/api/trading-bot", "GET", 200, 0.25)
    collector.observe_request("/api/trading-bot", "GET", 500, 0.40)

    count = registry.get_sample_value("fintola_http_request_latency_seconds_count", {"route": "/api/trading-bot"})
    total_latency = registry.get_sample_value("fintola_http_request_latency_seconds_sum", {"route": "/api/trading-bot"})
    ok = registry.get_sample_value(
        "fintola_http_requests_total",
        {"route": "/api/trading-bot", "method": "GET", "status": "200"},
    )
    failed = registry.get_sample_value(
        "fintola_http_requests_total",
        {"route": "/api/trading-bot", "method": "GET", "status": "500"},
    )

    assert count == 2.0
    assert total_latency == 0.65
    assert ok == 1.0
    assert failed == 1.0


def test_token_exchange_outcomes_are_bounded() -> None:
    registry = CollectorRegistry()
    collector = MetricsCollector(registry=registry)

    collector.record_token_exchange("ZERODHA", "success")
    collector.record_token_exchange("ZERODHA", "weird")

    assert registry.get_sample_value(
        "fintola_broker_token_exchange_total", {"broker": "ZERODHA", "outcome": "success"}
    ) == 1.0
    assert registry.get_sample_value(
        "fintola_broker_token_exchange_total", {"broker": "ZERODHA", "outcome": "__other__"}
    ) == 1.0


def test_bot_counters() -> None:
    registry = CollectorRegistry()
    collector = MetricsCollector(registry=registry)

    collector.record_bot_cycle("completed")
    collector.record_bot_cycle("skipped")
    collector.record_bot_trade("BUY")
    collector.record_bot_trade("BUY")

    assert registry.get_sample_value("fintola_bot_cycles_total", {"outcome": "completed"}) == 1.0
    assert registry.get_sample_value("fintola_bot_cycles_total", {"outcome": "skipped"}) == 1.0
    assert registry.get_sample_value("fintola_bot_trades_total", {"action": "BUY"}) == 2.0


def test_render_exposition_format() -> None:
    collector = MetricsCollector(registry=CollectorRegistry())
    collector.record_bot_trade("SELL")

    body = collector.render().decode()

    assert 'fintola_bot_trades_total{action="SELL"} 1.0' in body


def test_global_collector_override() -> None:
    collector = MetricsCollector(registry=CollectorRegistry())
    configure_metrics_collector(collector)
    assert get_metrics_collector() is collector
