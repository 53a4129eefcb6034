"""Price history from Yahoo Finance.

``yfinance`` is synchronous, so downloads run in a worker thread.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pandas as pd
import yfinance as yf
from loguru import logger

from fintola.core.exceptions import MarketDataError

TickerFactory = Callable[[str], Any]


class PriceHistoryClient:
    """Fetches OHLCV history and returns it in the ``{"meta", "quotes"}`` chart shape."""

    def __init__(self, ticker_factory: TickerFactory | None = None) -> None:
        self._ticker_factory = ticker_factory or yf.Ticker

    def _download(self, symbol: str, lookback_days: int, interval: str) -> pd.DataFrame:
        end = datetime.now(UTC)
        start = end - timedelta(days=lookback_days)
        ticker = self._ticker_factory(symbol)
        return ticker.history(start=start, end=end, interval=interval, auto_adjust=False)

    @staticmethod
    def _to_quotes(df: pd.DataFrame) -> list[dict[str, Any]]:
        quotes = []
        for timestamp, row in df.iterrows():
            ts = pd.Timestamp(timestamp)
            if ts.tzinfo is None:
                ts = ts.tz_localize("UTC")
            quote: dict[str, Any] = {"date": ts.tz_convert("UTC").isoformat()}
            for column in ("Open", "High", "Low", "Close", "Volume"):
                raw = row.get(column)
                quote[column.lower()] = None if raw is None or pd.isna(raw) else float(raw)
            quotes.append(quote)
        return quotes

    async def chart(self, symbol: str = "BTC-USD", lookback_days: int = 365, interval: str = "1h") -> dict[str, Any]:
        try:
            df = await asyncio.to_thread(self._download, symbol, lookback_days, interval)
        except Exception as e:
            logger.error(f"Error fetching price history for {symbol}: {e}")
            raise MarketDataError("Failed to fetch data", symbol=symbol) from e

        if df is None or df.empty:
            raise MarketDataError("No data returned", symbol=symbol)

        quotes = self._to_quotes(df)
        logger.debug("Fetched price history", symbol=symbol, interval=interval, points=len(quotes))
        return {
            "meta": {"symbol": symbol, "interval": interval, "lookbackDays": lookback_days, "count": len(quotes)},
            "quotes": quotes,
        }
