"""Trading bot records.

Everything here is a request/response payload. JSON uses the camelCase
field names the dashboard expects.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from fintola.core.models.base import CamelModel


class TradeAction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class BotConfig(CamelModel):
    """Trading bot configuration."""

    enabled: bool = False
    symbols: list[str] = Field(default_factory=list)
    trading_frequency: int = Field(15, ge=1, description="minutes between trading cycles")
    max_trades_per_day: int = Field(5, ge=0)
    investment_per_trade: float = Field(1000.0, ge=0)
    min_confidence: float = Field(0.7, ge=0, le=1)
    stop_loss_percent: float = 2.0
    take_profit_percent: float = 4.0
    broker_id: str = ""
    risk_reward_ratio: float = 2.0
    use_trailing_stop: bool = True
    trailing_stop_percent: float = 1.0
    max_drawdown_percent: float = 5.0
    notifications_enabled: bool = True


class AutoTraderConfig(BotConfig):
    """AutoTrader configuration: more conservative than the plain bot."""

    trading_frequency: int = Field(60, ge=1)
    max_trades_per_day: int = Field(3, ge=0)
    min_confidence: float = Field(0.8, ge=0, le=1)
    initial_capital: float = Field(100000.0, gt=0)
    auto_run: bool = False


class TradeResult(CamelModel):
    symbol: str
    trade_type: str
    price: float
    quantity: int
    timestamp: int = Field(description="unix milliseconds")
    success: bool
    profit_loss: float | None = None
    reason: str | None = None
    message: str | None = None
    order_id: str | None = None


class PositionInfo(CamelModel):
    symbol: str
    quantity: int
    entry_price: float
    current_price: float
    stop_loss: float
    take_profit: float
    unrealized_pnl: float = Field(0.0, alias="unrealizedPnL")
    unrealized_pnl_percent: float = Field(0.0, alias="unrealizedPnLPercent")
    entry_time: int


class SignalIndicators(CamelModel):
    rsi: float
    macd: float
    ema50: float
    ema200: float
    price_change_24h: float = Field(alias="priceChange24h")


class TradingSignal(CamelModel):
    """Model prediction for one symbol."""

    symbol: str
    action: TradeAction
    price: float
    confidence: float
    timestamp: str
    indicators: SignalIndicators | None = None
    reasoning: list[str] = Field(default_factory=list)
    price_target: float | None = None
    stop_loss: float | None = None


class BotStatistics(CamelModel):
    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float
    portfolio_value: float
    available_capital: float
    total_return: float
    total_return_percent: float
    daily_trades_remaining: int
    drawdown_percent: float = 0.0
    avg_holding_period: int | None = None
    most_profitable_trade: str | None = None
    biggest_loss: str | None = None
    last_updated: datetime | None = None


class IntradayPoint(CamelModel):
    timestamp: str
    value: float


class PerformancePoint(CamelModel):
    date: str
    value: float
    intraday: list[IntradayPoint] = Field(default_factory=list)


class FormattedTrade(CamelModel):
    """Trade row as rendered by the trade history table."""

    timestamp: int
    symbol: str
    action: str
    quantity: int
    price: float
    total: float
    status: str
    order_id: str
    profit_loss: float = 0.0


class WatchlistEntry(CamelModel):
    symbol: str
    name: str
