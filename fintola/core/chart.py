"""Candle extraction from pricing payloads and chart overlay assembly."""

from __future__ import annotations

from numbers import Real
from typing import Any

import pandas as pd

from fintola.core.exceptions import ChartDataError
from fintola.core.indicators import (
    atr,
    bollinger_bands,
    combine_signals,
    ema,
    ema_crossover_signals,
    ema_value,
    generate_ai_predictions,
    macd,
    obv,
    rsi_value,
    sma,
)
from fintola.core.models.market import Candle


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _to_unix_seconds(value: Any) -> int | None:
    """Unix seconds for an epoch number or a date string; ``None`` when it does not parse."""
    try:
        if _is_number(value):
            return int(value)
        timestamp = pd.Timestamp(value)
        if pd.isna(timestamp):
            return None
        if timestamp.tzinfo is None:
            timestamp = timestamp.tz_localize("UTC")
        return int(timestamp.timestamp())
    except (ValueError, TypeError, OverflowError):
        return None


def _from_quotes(entries: list[Any]) -> list[Candle]:
    candles = []
    for entry in entries:
        if not isinstance(entry, dict) or entry.get("date") is None:
            continue
        if not all(_is_number(entry.get(key)) for key in ("open", "high", "low", "close")):
            continue
        time = _to_unix_seconds(entry["date"])
        if time is None:
            continue
        volume = entry.get("volume")
        candles.append(
            Candle(
                time=time,
                open=entry["open"],
                high=entry["high"],
                low=entry["low"],
                close=entry["close"],
                volume=volume if _is_number(volume) else None,
            )
        )
    return candles


def _from_raw_chart(timestamps: list[Any], quote: dict[str, Any]) -> list[Candle]:
    def pick(key: str, index: int) -> float:
        series = quote.get(key)
        if not isinstance(series, list) or index >= len(series):
            return 0
        value = series[index]
        return value if _is_number(value) else 0

    candles = []
    for index, time in enumerate(timestamps):
        seconds = _to_unix_seconds(time) if _is_number(time) else None
        if seconds is None:
            continue
        candles.append(
            Candle(
                time=seconds,
                open=pick("open", index),
                high=pick("high", index),
                low=pick("low", index),
                close=pick("close", index),
            )
        )
    return candles


def process_chart_data(payload: Any) -> list[Candle]:
    """Turn a pricing API payload into candles.

    Two shapes are understood: ``{"quotes": [...]}`` with one dict per
    interval (entries lacking numeric OHLC or a parseable date are dropped),
    and the raw chart shape with parallel ``timestamp`` and
    ``indicators.quote[0]`` arrays (gaps become 0, entries without a numeric
    timestamp are dropped).
    """
    if isinstance(payload, dict) and isinstance(payload.get("quotes"), list):
        return _from_quotes(payload["quotes"])

    if isinstance(payload, dict) and isinstance(payload.get("timestamp"), list):
        indicators = payload.get("indicators")
        quotes = indicators.get("quote") if isinstance(indicators, dict) else None
        quote = quotes[0] if isinstance(quotes, list) and quotes else None
        if payload["timestamp"] and isinstance(quote, dict) and quote:
            return _from_raw_chart(payload["timestamp"], quote)

    raise ChartDataError("Unexpected data format")


def build_overlay(
    candles: list[Candle],
    short_period: int = 9,
    long_period: int = 21,
    sma_period: int = 20,
    include_ai: bool = True,
) -> dict[str, Any]:
    """Assemble the series and markers drawn on top of the candlestick chart."""
    crossover = ema_crossover_signals(candles, short_period, long_period)
    ai_markers = generate_ai_predictions(candles) if include_ai else []
    return {
        "candles": [candle.model_dump() for candle in candles],
        "sma": [point.model_dump() for point in sma(candles, sma_period)],
        "shortEma": [point.model_dump() for point in ema(candles, short_period)],
        "longEma": [point.model_dump() for point in ema(candles, long_period)],
        "crossoverMarkers": [marker.model_dump() for marker in crossover],
        "aiMarkers": [marker.model_dump() for marker in ai_markers],
        "markers": [marker.model_dump() for marker in combine_signals(crossover, ai_markers)],
    }


def indicator_summary(candles: list[Candle]) -> dict[str, Any]:
    """Latest RSI, MACD, Bollinger bands, ATR, OBV and long EMAs of the candles."""
    closes = [candle.close for candle in candles]
    highs = [candle.high for candle in candles]
    lows = [candle.low for candle in candles]
    volumes = [candle.volume or 0.0 for candle in candles]
    return {
        "rsi": rsi_value(closes),
        "macd": macd(closes),
        "bollinger": bollinger_bands(closes),
        "atr": atr(highs, lows, closes),
        "obv": obv(closes, volumes),
        "ema50": ema_value(closes, 50),
        "ema200": ema_value(closes, 200),
    }


def chart_options(width: int) -> dict[str, Any]:
    return {
        "width": width,
        "height": 400,
        "layout": {"background": {"color": "#1e1e1e"}, "textColor": "#d1d1d1"},
        "grid": {"vertLines": {"color": "#333333"}, "horzLines": {"color": "#333333"}},
        "crosshair": {"mode": 1},
        "rightPriceScale": {"borderColor": "#333333"},
        "timeScale": {"borderColor": "#333333"},
    }


def candlestick_options() -> dict[str, Any]:
    return {
        "upColor": "#00ff00",
        "downColor": "#ff0000",
        "borderVisible": False,
        "wickUpColor": "#00ff00",
        "wickDownColor": "#ff0000",
    }


def sma_options() -> dict[str, Any]:
    return {"color": "#ffa500", "lineWidth": 2}


def ema_options() -> dict[str, Any]:
    return {"color": "#00aaff", "lineWidth": 2}
