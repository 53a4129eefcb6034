"""自动交易接口测试"""

from __future__ import annotations

import asyncio

import pytest

from fintola.core.trading import AutoTrader, configure_auto_trader, get_auto_trader

PREMIUM_USER = {"X-User-Id": "premium_user"}
BASIC_USER = {"X-User-Id": "basic_user"}
START_CONFIG = {"enabled": True, "brokerId": "ZERODHA", "symbols": ["TCS.NS"]}


class TestAccess:
    """测试会员校验"""

    def test_requires_login(self, client):
        response = client.get("/api/auto-trader")

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Unauthorized"
        assert body["code"] == "AUTHENTICATION_ERROR"

    def test_requires_premium(self, client):
        response = client.get("/api/auto-trader", headers=BASIC_USER)

        assert response.status_code == 403
        assert response.json()["error"] == "Premium subscription required for automated trading"

    def test_unknown_user_is_not_premium(self, client):
        assert client.get("/api/auto-trader", headers={"X-User-Id": "stranger"}).status_code == 403

    def test_status(self, client):
        response = client.get("/api/auto-trader", headers=PREMIUM_USER)

        assert response.status_code == 200
        body = response.json()
        assert body["isRunning"] is False
        assert body["config"]["tradingFrequency"] == 60
        assert body["tradeHistory"] == []


class TestActions:
    """测试 POST 操作"""

    @pytest.mark.parametrize(
        ("payload", "message"),
        [
            ({}, "Action is required"),
            ({"action": "update"}, "Config is required for update action"),
            ({"action": "addSymbols", "symbols": "TCS.NS"}, "Symbols array is required for addSymbols action"),
            ({"action": "removeSymbol"}, "Symbol is required for removeSymbol action"),
            ({"action": "explode"}, "Unknown action: explode"),
        ],
    )
    def test_bad_requests(self, client, payload, message):
        response = client.post("/api/auto-trader", json=payload, headers=PREMIUM_USER)

        assert response.status_code == 400
        assert response.json()["error"] == message

    def test_start_and_stop(self, client, store):
        started = client.post("/api/auto-trader", json={"action": "start", "config": START_CONFIG}, headers=PREMIUM_USER)

        assert started.status_code == 200
        assert started.json()["isRunning"] is True
        assert started.json()["config"]["symbols"] == ["TCS.NS"]
        public = asyncio.run(store.get_user("premium_user"))["public"]
        assert public["autoTraderEnabled"] is True
        assert public["autoTraderConfig"]["brokerId"] == "ZERODHA"

        again = client.post("/api/auto-trader", json={"action": "start"}, headers=PREMIUM_USER)
        assert again.json()["isRunning"] is True

        stopped = client.post("/api/auto-trader", json={"action": "stop"}, headers=PREMIUM_USER)
        assert stopped.json()["isRunning"] is False
        assert asyncio.run(store.get_user("premium_user"))["public"]["autoTraderEnabled"] is False

    def test_start_failure(self, client):
        response = client.post(
            "/api/auto-trader",
            json={"action": "start", "config": {"enabled": True, "brokerId": ""}},
            headers=PREMIUM_USER,
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to start AutoTrader"
        assert response.json()["code"] == "TRADING_BOT_ERROR"

    def test_update(self, client, store):
        response = client.post(
            "/api/auto-trader", json={"action": "update", "config": {"minConfidence": 0.85}}, headers=PREMIUM_USER
        )

        assert response.status_code == 200
        assert response.json()["config"]["minConfidence"] == 0.85
        public = asyncio.run(store.get_user("premium_user"))["public"]
        assert public["autoTraderConfig"]["minConfidence"] == 0.85

    def test_invalid_update(self, client):
        response = client.post(
            "/api/auto-trader", json={"action": "update", "config": {"minConfidence": 5}}, headers=PREMIUM_USER
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid trading bot configuration"

    def test_symbols(self, client):
        configure_auto_trader(AutoTrader({"symbols": ["TCS.NS"]}))

        added = client.post(
            "/api/auto-trader", json={"action": "addSymbols", "symbols": ["INFY.NS", "TCS.NS"]}, headers=PREMIUM_USER
        )
        assert added.json()["config"]["symbols"] == ["TCS.NS", "INFY.NS"]

        removed = client.post(
            "/api/auto-trader", json={"action": "removeSymbol", "symbol": "TCS.NS"}, headers=PREMIUM_USER
        )
        assert removed.json()["config"]["symbols"] == ["INFY.NS"]
        assert get_auto_trader().config.symbols == ["INFY.NS"]
