"""Buy/sell marker generation from indicator series."""

from __future__ import annotations

from collections.abc import Sequence

from fintola.core.indicators.moving_average import ema
from fintola.core.indicators.oscillators import momentum, rsi
from fintola.core.indicators.volatility import volatility
from fintola.core.models.market import Candle, LinePoint, Marker

AI_BUY_TEXT = "AI BUY"
AI_SELL_TEXT = "AI SELL"
SUPPRESSION_WINDOW_SECONDS = 5 * 86400


def buy_marker(time: int, text: str = "BUY", color: str = "green") -> Marker:
    return Marker(time=time, position="belowBar", color=color, shape="arrowUp", text=text)


def sell_marker(time: int, text: str = "SELL", color: str = "red") -> Marker:
    return Marker(time=time, position="aboveBar", color=color, shape="arrowDown", text=text)


def find_signals(short: Sequence[LinePoint], long: Sequence[LinePoint]) -> list[Marker]:
    """Crossover markers between two index-aligned series.

    BUY where ``short`` moves from strictly below ``long`` to strictly above
    it between consecutive points, SELL for the opposite move. Touching or
    equal values never produce a marker.
    """
    markers: list[Marker] = []
    for i in range(1, min(len(short), len(long))):
        prev_short, prev_long = short[i - 1].value, long[i - 1].value
        cur_short, cur_long = short[i].value, long[i].value
        if prev_short < prev_long and cur_short > cur_long:
            markers.append(buy_marker(short[i].time))
        elif prev_short > prev_long and cur_short < cur_long:
            markers.append(sell_marker(short[i].time))
    return markers


def align_series(
    short: Sequence[LinePoint], long: Sequence[LinePoint]
) -> tuple[list[LinePoint], list[LinePoint]]:
    """Restrict two series to their common timestamps, preserving order."""
    long_times = {point.time for point in long}
    short_aligned = [point for point in short if point.time in long_times]
    short_times = {point.time for point in short_aligned}
    long_aligned = [point for point in long if point.time in short_times]
    return short_aligned, long_aligned


def ema_crossover_signals(data: Sequence[Candle], short_period: int = 9, long_period: int = 21) -> list[Marker]:
    """EMA crossover markers with both averages aligned on candle time."""
    short_aligned, long_aligned = align_series(ema(data, short_period), ema(data, long_period))
    return find_signals(short_aligned, long_aligned)


def _has_recent(markers: Sequence[Marker], text: str, time: int) -> bool:
    return any(m.text == text and abs(m.time - time) < SUPPRESSION_WINDOW_SECONDS for m in markers)


def generate_ai_predictions(data: Sequence[Candle], lookback_period: int = 14) -> list[Marker]:
    """Heuristic "AI" markers gated by RSI, momentum and volatility.

    Buy: RSI < 30, momentum > 0, volatility < 0.15.
    Sell: RSI > 70, momentum < 0, volatility > 0.1.
    A marker is skipped when one with the same text exists within five days.
    """
    if len(data) <= lookback_period:
        return []

    rsi_values = rsi(data, lookback_period)
    volatility_values = volatility(data, lookback_period)
    momentum_values = momentum(data, lookback_period)

    markers: list[Marker] = []
    for i in range(lookback_period, len(data)):
        j = i - lookback_period
        rsi_value, volatility_value, momentum_value = rsi_values[j], volatility_values[j], momentum_values[j]
        time = data[i].time

        if rsi_value < 30 and momentum_value > 0 and volatility_value < 0.15:
            if not _has_recent(markers, AI_BUY_TEXT, time):
                markers.append(buy_marker(time, AI_BUY_TEXT, "#00BFFF"))

        if rsi_value > 70 and momentum_value < 0 and volatility_value > 0.1:
            if not _has_recent(markers, AI_SELL_TEXT, time):
                markers.append(sell_marker(time, AI_SELL_TEXT, "#FF1493"))

    return markers


def combine_signals(traditional: Sequence[Marker], ai: Sequence[Marker]) -> list[Marker]:
    """Merge two marker lists ordered by time."""
    return sorted([*traditional, *ai], key=lambda marker: marker.time)


__all__ = [
    "AI_BUY_TEXT",
    "AI_SELL_TEXT",
    "SUPPRESSION_WINDOW_SECONDS",
    "align_series",
    "buy_marker",
    "combine_signals",
    "ema_crossover_signals",
    "find_signals",
    "generate_ai_predictions",
    "sell_marker",
]
