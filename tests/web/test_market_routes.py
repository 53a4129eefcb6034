"""行情与信号接口测试"""

from __future__ import annotations

from fintola.core.exceptions import MarketDataError


class TestFinance:
    def test_default_symbol(self, client, price_client):
        response = client.get("/api/finance")

        assert response.status_code == 200
        assert len(response.json()["quotes"]) == 60
        assert price_client.requests == [("BTC-USD", 365, "1h")]

    def test_symbol_parameter(self, client, price_client):
        client.get("/api/finance", params={"symbol": "AAPL"})
        assert price_client.requests[0][0] == "AAPL"

    def test_upstream_failure(self, client, price_client):
        price_client.error = MarketDataError("Failed to fetch data", symbol="BTC-USD")

        response = client.get("/api/finance")

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to fetch data"
        assert response.json()["code"] == "MARKET_DATA_ERROR"


class TestChart:
    def test_overlay(self, client):
        response = client.get("/api/chart", params={"short": 5, "long": 10, "smaPeriod": 20, "width": 640})

        assert response.status_code == 200
        body = response.json()
        assert body["symbol"] == "BTC-USD"
        assert len(body["candles"]) == 60
        assert len(body["sma"]) == 41
        assert len(body["shortEma"]) == 56
        assert len(body["longEma"]) == 51
        assert body["options"]["chart"]["width"] == 640
        assert body["options"]["candlestick"]["upColor"] == "#00ff00"
        assert set(body["summary"]) == {"rsi", "macd", "bollinger", "atr", "obv", "ema50", "ema200"}
        assert 0 <= body["summary"]["rsi"] <= 100
        for marker in body["markers"]:
            assert marker["shape"] in ("arrowUp", "arrowDown")

    def test_ai_markers_can_be_disabled(self, client):
        assert client.get("/api/chart", params={"ai": "false"}).json()["aiMarkers"] == []

    def test_unexpected_payload(self, client, price_client):
        price_client.payload = {"chart": {"result": None}}

        response = client.get("/api/chart")

        assert response.status_code == 422
        assert response.json()["error"] == "Unexpected data format"

    def test_invalid_period(self, client):
        response = client.get("/api/chart", params={"short": 0})
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestSignals:
    def test_requires_symbols(self, client):
        response = client.get("/api/ml-trading-signals")

        assert response.status_code == 400
        assert response.json()["error"] == "No symbols provided"

    def test_one_signal_per_symbol(self, client):
        response = client.get("/api/ml-trading-signals", params={"symbols": "TCS.NS, INFY.NS,"})

        assert response.status_code == 200
        body = response.json()
        assert list(body) == ["TCS.NS", "INFY.NS"]
        assert body["TCS.NS"]["action"] in ("BUY", "SELL", "HOLD")
        assert "priceChange24h" in body["INFY.NS"]["indicators"]
