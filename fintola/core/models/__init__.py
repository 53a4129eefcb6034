"""Data models."""

from fintola.core.models.base import CamelModel, snake_to_camel
from fintola.core.models.broker import BrokerConnection, BrokerSession, BrokerToken
from fintola.core.models.market import Candle, LinePoint, Marker
from fintola.core.models.trading import (
    AutoTraderConfig,
    BotConfig,
    BotStatistics,
    FormattedTrade,
    IntradayPoint,
    PerformancePoint,
    PositionInfo,
    SignalIndicators,
    TradeAction,
    TradeResult,
    TradingSignal,
    WatchlistEntry,
)

__all__ = [
    "CamelModel",
    "snake_to_camel",
    "Candle",
    "LinePoint",
    "Marker",
    "AutoTraderConfig",
    "BotConfig",
    "BotStatistics",
    "FormattedTrade",
    "IntradayPoint",
    "PerformancePoint",
    "PositionInfo",
    "SignalIndicators",
    "TradeAction",
    "TradeResult",
    "TradingSignal",
    "WatchlistEntry",
    "BrokerConnection",
    "BrokerSession",
    "BrokerToken",
]
