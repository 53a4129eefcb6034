"""RSI, momentum and MACD."""

from __future__ import annotations

from collections.abc import Sequence

from fintola.core.indicators.moving_average import ema_value
from fintola.core.models.market import Candle

# substituted for a zero average loss
RSI_EPSILON = 0.001


def _rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    rs = avg_gain / (avg_loss if avg_loss != 0 else RSI_EPSILON)
    return 100 - 100 / (1 + rs)


def rsi(data: Sequence[Candle], period: int = 14) -> list[float]:
    """Wilder-smoothed RSI series.

    Entry ``j`` belongs to candle ``period + j``. The first value uses plain
    averages of the first ``period`` deltas, later values use
    ``avg = (avg * (period - 1) + value) / period``.
    """
    if period < 1:
        raise ValueError(f"period must be positive, got {period}")
    if len(data) <= period:
        return []

    avg_gain = 0.0
    avg_loss = 0.0
    for i in range(1, period + 1):
        change = data[i].close - data[i - 1].close
        if change >= 0:
            avg_gain += change
        else:
            avg_loss -= change
    avg_gain /= period
    avg_loss /= period

    values = [_rsi_from_averages(avg_gain, avg_loss)]
    for i in range(period + 1, len(data)):
        change = data[i].close - data[i - 1].close
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        values.append(_rsi_from_averages(avg_gain, avg_loss))
    return values


def rsi_value(prices: Sequence[float], period: int = 14) -> float:
    """Final RSI of a price list.

    Returns 50 when there are fewer than ``period + 1`` prices and 100 when the
    smoothed average loss is exactly zero.
    """
    if len(prices) < period + 1:
        return 50.0

    gains = 0.0
    losses = 0.0
    for i in range(1, period + 1):
        difference = prices[i] - prices[i - 1]
        if difference >= 0:
            gains += difference
        else:
            losses -= difference

    avg_gain = gains / period
    avg_loss = losses / period
    for i in range(period + 1, len(prices)):
        difference = prices[i] - prices[i - 1]
        avg_gain = (avg_gain * (period - 1) + max(difference, 0.0)) / period
        avg_loss = (avg_loss * (period - 1) + max(-difference, 0.0)) / period

    if avg_loss == 0:
        return 100.0
    return 100 - 100 / (1 + avg_gain / avg_loss)


def momentum(data: Sequence[Candle], period: int) -> list[float]:
    """Price delta over ``period`` candles, one value per candle from index ``period``."""
    return [data[i].close - data[i - period].close for i in range(period, len(data))]


def macd(
    prices: Sequence[float],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> dict[str, float]:
    """MACD line, signal line and histogram for the latest price.

    All zeros when there are fewer than ``max(fast, slow) + signal`` prices.
    """
    if len(prices) < max(fast_period, slow_period) + signal_period:
        return {"macdLine": 0.0, "signalLine": 0.0, "histogram": 0.0}

    macd_line = ema_value(prices, fast_period) - ema_value(prices, slow_period)
    history = [
        ema_value(prices[: i + 1], fast_period) - ema_value(prices[: i + 1], slow_period)
        for i in range(len(prices))
    ]
    signal_line = ema_value(history[-signal_period:], signal_period)
    return {
        "macdLine": macd_line,
        "signalLine": signal_line,
        "histogram": macd_line - signal_line,
    }


__all__ = ["RSI_EPSILON", "macd", "momentum", "rsi", "rsi_value"]
