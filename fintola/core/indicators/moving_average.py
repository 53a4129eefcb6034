"""Simple and exponential moving averages."""

from __future__ import annotations

from collections.abc import Sequence

from fintola.core.models.market import Candle, LinePoint


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be positive, got {period}")


def sma(data: Sequence[Candle], period: int) -> list[LinePoint]:
    """Simple moving average of closes.

    One point per candle from index ``period - 1`` onwards, so the result has
    ``len(data) - period + 1`` points (none when there is not enough data).
    """
    _check_period(period)
    return [
        LinePoint(time=data[i].time, value=sum(c.close for c in data[i - period + 1 : i + 1]) / period)
        for i in range(period - 1, len(data))
    ]


def ema(data: Sequence[Candle], period: int) -> list[LinePoint]:
    """Exponential moving average seeded with the SMA of the first ``period`` closes."""
    _check_period(period)
    if len(data) < period:
        return []

    k = 2 / (period + 1)
    prev = sum(candle.close for candle in data[:period]) / period
    points = [LinePoint(time=data[period - 1].time, value=prev)]
    for candle in data[period:]:
        prev = candle.close * k + prev * (1 - k)
        points.append(LinePoint(time=candle.time, value=prev))
    return points


def ema_value(prices: Sequence[float], period: int) -> float:
    """Last EMA value of a plain price list; the last price when the list is too short."""
    _check_period(period)
    if len(prices) < period:
        return float(prices[-1]) if prices else 0.0

    k = 2 / (period + 1)
    value = sum(prices[:period]) / period
    for price in prices[period:]:
        value = price * k + value * (1 - k)
    return value


__all__ = ["ema", "ema_value", "sma"]
