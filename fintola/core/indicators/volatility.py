"""Volatility measures: return dispersion, Bollinger bands and ATR."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from fintola.core.models.market import Candle


def volatility(data: Sequence[Candle], period: int) -> list[float]:
    """Population std-dev of percentage returns over the ``period`` closes before each candle.

    One value per candle from index ``period``.
    """
    closes = np.array([candle.close for candle in data], dtype=float)
    values: list[float] = []
    for i in range(period, len(closes)):
        window = closes[i - period : i]
        returns = np.diff(window) / window[:-1]
        values.append(float(np.std(returns)) if returns.size else 0.0)
    return values


def bollinger_bands(prices: Sequence[float], period: int = 20, std_multiplier: float = 2.0) -> dict[str, float]:
    """Upper/middle/lower bands of the last ``period`` prices.

    Falls back to ±5% of the last price when there is not enough data.
    """
    if len(prices) < period:
        last_price = float(prices[-1]) if prices else 0.0
        return {"upper": last_price * 1.05, "middle": last_price, "lower": last_price * 0.95}

    window = np.array(prices[-period:], dtype=float)
    middle = float(window.mean())
    std_dev = float(window.std())
    return {
        "upper": middle + std_dev * std_multiplier,
        "middle": middle,
        "lower": middle - std_dev * std_multiplier,
    }


def atr(highs: Sequence[float], lows: Sequence[float], closes: Sequence[float], period: int = 14) -> float:
    """Wilder-smoothed average true range."""
    if min(len(highs), len(lows), len(closes)) < period + 1:
        if not highs or not lows:
            return 0.0
        return float(highs[-1] - lows[-1])

    true_ranges = [
        max(highs[i] - lows[i], abs(highs[i] - closes[i - 1]), abs(lows[i] - closes[i - 1]))
        for i in range(1, len(highs))
    ]
    value = sum(true_ranges[:period]) / period
    for tr in true_ranges[period:]:
        value = (value * (period - 1) + tr) / period
    return value


def obv(prices: Sequence[float], volumes: Sequence[float]) -> float:
    """On-balance volume; unchanged on flat closes."""
    if len(prices) < 2 or len(volumes) < 2:
        return float(volumes[-1]) if volumes else 0.0

    total = 0.0
    for i in range(1, min(len(prices), len(volumes))):
        if prices[i] > prices[i - 1]:
            total += volumes[i]
        elif prices[i] < prices[i - 1]:
            total -= volumes[i]
    return total


__all__ = ["atr", "bollinger_bands", "obv", "volatility"]
