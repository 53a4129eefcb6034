"""Pytest configuration for fintola test suite."""

from __future__ import annotations

import random

import pytest
from prometheus_client import CollectorRegistry

from fintola.core.config import AppConfig
from fintola.core.models import Candle
from fintola.core.monitoring import MetricsCollector, configure_metrics_collector
from fintola.core.trading import configure_auto_trader


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--fintola-run-integration",
        action="store_true",
        default=False,
        help="Run fintola integration tests that require external services.",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the integration marker for fintola tests."""

    config.addinivalue_line(
        "markers",
        "integration: marks fintola tests requiring network or external services",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--fintola-run-integration"):
        return

    skip_integration = pytest.mark.skip(
        reason="integration tests require --fintola-run-integration",
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture(autouse=True)
def metrics_collector() -> MetricsCollector:
    """Fresh metrics registry per test."""

    collector = MetricsCollector(registry=CollectorRegistry())
    configure_metrics_collector(collector)
    yield collector
    configure_metrics_collector(None)


@pytest.fixture(autouse=True)
def reset_auto_trader() -> None:
    configure_auto_trader(None)
    yield
    configure_auto_trader(None)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


def _candles(closes: list[float], start: int = 1_700_000_000, step: int = 3600) -> list[Candle]:
    return [
        Candle(time=start + i * step, open=close, high=close + 1, low=close - 1, close=close)
        for i, close in enumerate(closes)
    ]


@pytest.fixture
def make_candles():
    """Factory building hourly candles from a list of closes."""

    return _candles


@pytest.fixture
def app_config() -> AppConfig:
    """Configuration with credentials for every supported broker."""

    return AppConfig.from_dict(
        {
            "server": {"app_url": "https://app.example.com"},
            "brokers": {
                "ZERODHA": {"api_key": "kite_key", "api_secret": "kite_secret"},
                "UPSTOX": {"api_key": "upstox_key", "api_secret": "upstox_secret"},
                "ANGELONE": {"api_key": "angel_key", "api_secret": "angel_secret"},
            },
        }
    )
