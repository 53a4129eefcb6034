"""Fixtures for the HTTP API tests."""

from __future__ import annotations

from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from fintola.core.auth import InMemoryMetadataStore
from fintola.core.auth.session import HeaderAuthenticator
from fintola.core.brokers import BrokerConnector
from fintola.core.market_data import PriceHistoryClient
from fintola.web.app import create_app


class FakePriceClient(PriceHistoryClient):
    """Serves canned chart payloads instead of calling Yahoo Finance."""

    def __init__(self, payload: Any = None, error: Exception | None = None) -> None:
        super().__init__(ticker_factory=lambda symbol: None)
        self.payload = payload if payload is not None else _hourly_payload(60)
        self.error = error
        self.requests: list[tuple[str, int, str]] = []

    async def chart(self, symbol: str = "BTC-USD", lookback_days: int = 365, interval: str = "1h") -> Any:
        self.requests.append((symbol, lookback_days, interval))
        if self.error is not None:
            raise self.error
        return self.payload


def _hourly_payload(count: int) -> dict[str, Any]:
    quotes = []
    for i in range(count):
        close = 100 + (i % 12) - 6
        quotes.append(
            {
                "date": 1_700_000_000 + i * 3600,
                "open": close - 0.5,
                "high": close + 1,
                "low": close - 1,
                "close": close,
                "volume": 1000 + i,
            }
        )
    return {"meta": {"symbol": "BTC-USD", "count": count}, "quotes": quotes}


@pytest.fixture
def store() -> InMemoryMetadataStore:
    return InMemoryMetadataStore(
        {
            "premium_user": {"public": {"isPremiumUser": True}},
            "basic_user": {"public": {"isPremiumUser": False}},
        }
    )


@pytest.fixture
def price_client() -> FakePriceClient:
    return FakePriceClient()


@pytest.fixture
def token_response() -> dict[str, Any]:
    """Mutable body returned by the fake broker token endpoint."""

    return {"status": 200, "json": {"access_token": "at", "refresh_token": "rt", "expires_in": 3600}}


@pytest.fixture
def broker_transport(token_response) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(token_response["status"], json=token_response["json"])

    return httpx.MockTransport(handler)


@pytest.fixture
def app(app_config, store, price_client, broker_transport):
    return create_app(
        app_config,
        metadata_store=store,
        authenticator=HeaderAuthenticator(),
        price_client=price_client,
        broker_connector=BrokerConnector(app_config, store, transport=broker_transport),
    )


@pytest.fixture
def client(app):
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client
