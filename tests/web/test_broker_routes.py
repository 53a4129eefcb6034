"""券商授权接口测试"""

from __future__ import annotations

import asyncio
from urllib.parse import parse_qs, urlsplit

from fastapi.testclient import TestClient

from fintola.core.auth import UserMetadataStore
from fintola.core.auth.session import HeaderAuthenticator
from fintola.core.brokers import BrokerConnector
from fintola.core.config import AppConfig
from fintola.core.exceptions import MetadataStoreError
from fintola.web.app import create_app

USER = {"X-User-Id": "user_1"}
IPHONE = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15"
CALLBACK_PARAMS = {"code": "abc", "brokerId": "ZERODHA", "userId": "user_1", "sessionId": "user_1-1"}


class UnavailableStore(UserMetadataStore):
    async def get_user(self, user_id):
        raise MetadataStoreError("down", user_id=user_id)

    async def update_metadata(self, user_id, public=None, private=None):
        raise MetadataStoreError("down", user_id=user_id)


def _error_message(response) -> str:
    location = response.headers["location"]
    assert location.startswith("https://app.example.com/trading/error?")
    return parse_qs(urlsplit(location).query)["message"][0]


class TestBrokerConnect:
    """测试 /api/broker-connect"""

    def test_requires_login(self, client):
        response = client.post("/api/broker-connect", json={"brokerId": "ZERODHA"})
        assert response.status_code == 401

    def test_returns_authorization_urls(self, client, store):
        response = client.post("/api/broker-connect", json={"brokerId": "ZERODHA"}, headers=USER)

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"authUrl", "mobileDeepLink", "sessionId"}
        assert body["authUrl"].startswith("https://kite.zerodha.com/connect/login?api_key=kite_key")
        assert body["mobileDeepLink"].startswith("kite://login?")
        assert body["sessionId"].startswith("user_1-")
        private = asyncio.run(store.get_user("user_1"))["private"]
        assert private["brokerSessions"][body["sessionId"]]["status"] == "pending"

    def test_angelone_has_null_deep_link(self, client):
        body = client.post("/api/broker-connect", json={"brokerId": "ANGELONE"}, headers=USER).json()
        assert body["mobileDeepLink"] is None

    def test_unsupported_broker(self, client):
        response = client.post("/api/broker-connect", json={"brokerId": "ROBINHOOD"}, headers=USER)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid broker specified"
        assert response.json()["code"] == "BROKER_NOT_SUPPORTED"

    def test_missing_broker_id(self, client):
        response = client.post("/api/broker-connect", json={}, headers=USER)
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid broker specified"

    def test_unconfigured_broker(self, store):
        config = AppConfig()
        app = create_app(config, metadata_store=store, authenticator=HeaderAuthenticator())

        response = TestClient(app).post("/api/broker-connect", json={"brokerId": "UPSTOX"}, headers=USER)

        assert response.status_code == 500
        assert response.json()["error"] == "Broker API key not configured"

    def test_store_failure(self, app_config):
        store = UnavailableStore()
        app = create_app(
            app_config,
            metadata_store=store,
            authenticator=HeaderAuthenticator(),
            broker_connector=BrokerConnector(app_config, store),
        )

        response = TestClient(app).post("/api/broker-connect", json={"brokerId": "ZERODHA"}, headers=USER)

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to connect to broker"
        assert response.json()["code"] == "BROKER_ERROR"


class TestBrokerCallback:
    """测试 /api/broker-callback"""

    def test_missing_parameters(self, client):
        response = client.get("/api/broker-callback", params={"code": "abc", "brokerId": "ZERODHA"})

        assert response.status_code == 307
        assert response.headers["location"].endswith("message=Missing%20required%20parameters")
        assert _error_message(response) == "Missing required parameters"

    def test_desktop_success(self, client, store):
        response = client.get("/api/broker-callback", params=CALLBACK_PARAMS)

        assert response.status_code == 307
        assert response.headers["location"] == "https://app.example.com/trading/automated"
        documents = asyncio.run(store.get_user("user_1"))
        assert documents["private"]["brokerTokens"]["ZERODHA"]["accessToken"] == "at"
        assert documents["private"]["brokerSessions"]["user_1-1"]["status"] == "completed"
        assert documents["public"]["connectedBrokers"]["ZERODHA"]["connected"] is True

    def test_mobile_success(self, client):
        response = client.get("/api/broker-callback", params=CALLBACK_PARAMS, headers={"User-Agent": IPHONE})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert 'window.location.href = "tradex://broker-connected?status=success&broker=ZERODHA"' in response.text
        assert "https://app.example.com/trading/automated" in response.text
        assert "1000" in response.text

    def test_missing_access_token(self, client, token_response):
        token_response["json"] = {"error": "invalid request token"}

        response = client.get("/api/broker-callback", params=CALLBACK_PARAMS)

        assert _error_message(response) == "Failed to get access token"

    def test_token_endpoint_failure(self, client, token_response):
        token_response["status"] = 500
        token_response["json"] = ["unexpected"]

        response = client.get("/api/broker-callback", params=CALLBACK_PARAMS)

        assert _error_message(response) == "Failed to connect broker"

    def test_unknown_broker(self, client):
        response = client.get("/api/broker-callback", params={**CALLBACK_PARAMS, "brokerId": "NOPE"})
        assert _error_message(response) == "Failed to connect broker"
