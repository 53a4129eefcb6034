"""Technical indicators and chart signal detection."""

from fintola.core.indicators.moving_average import ema, ema_value, sma
from fintola.core.indicators.oscillators import RSI_EPSILON, macd, momentum, rsi, rsi_value
from fintola.core.indicators.signals import (
    align_series,
    combine_signals,
    ema_crossover_signals,
    find_signals,
    generate_ai_predictions,
)
from fintola.core.indicators.volatility import atr, bollinger_bands, obv, volatility

__all__ = [
    "RSI_EPSILON",
    "align_series",
    "atr",
    "bollinger_bands",
    "combine_signals",
    "ema",
    "ema_crossover_signals",
    "ema_value",
    "find_signals",
    "generate_ai_predictions",
    "macd",
    "momentum",
    "obv",
    "rsi",
    "rsi_value",
    "sma",
    "volatility",
]
