"""Randomised demo data for the trading bot dashboard.

Nothing here is derived from real state: prices are random walks around a
fixed set of sample NSE stocks. Every generator accepts an optional
``random.Random`` so callers can make the output reproducible.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from fintola.core.models import (
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

INITIAL_CAPITAL = 100000.0


@dataclass(frozen=True)
class SampleStock:
    symbol: str
    name: str
    base_price: float
    volatility: float


SAMPLE_STOCKS: tuple[SampleStock, ...] = (
    SampleStock("RELIANCE.NS", "Reliance Industries", 2750, 0.02),
    SampleStock("TATASTEEL.NS", "Tata Steel Ltd", 142, 0.03),
    SampleStock("HDFCBANK.NS", "HDFC Bank", 1680, 0.015),
    SampleStock("INFY.NS", "Infosys Ltd", 1450, 0.025),
    SampleStock("TCS.NS", "Tata Consultancy Services", 3490, 0.018),
    SampleStock("SBIN.NS", "State Bank of India", 740, 0.028),
    SampleStock("WIPRO.NS", "Wipro Ltd", 456, 0.022),
    SampleStock("LT.NS", "Larsen & Toubro", 3120, 0.019),
    SampleStock("MARUTI.NS", "Maruti Suzuki India", 10450, 0.024),
    SampleStock("ICICIBANK.NS", "ICICI Bank", 1020, 0.017),
)


def _rng(rng: random.Random | None) -> random.Random:
    return rng if rng is not None else random.Random()


def find_sample_stock(symbol: str) -> SampleStock:
    """Sample stock for ``symbol``; unknown symbols get a 1000/2% placeholder."""
    for stock in SAMPLE_STOCKS:
        if stock.symbol == symbol:
            return stock
    return SampleStock(symbol, symbol.replace(".NS", ""), 1000, 0.02)


def random_price(base_price: float, volatility: float, rng: random.Random | None = None) -> float:
    """Random price within ``±volatility`` of the base, floored at half the base."""
    change = base_price * volatility * (_rng(rng).random() * 2 - 1)
    return max(base_price + change, base_price * 0.5)


def random_timestamp(days_ago: float = 30, rng: random.Random | None = None) -> int:
    """Random unix-millisecond timestamp within the last ``days_ago`` days."""
    now = datetime.now(UTC)
    past = now - timedelta(days=_rng(rng).random() * days_ago)
    return int(past.timestamp() * 1000)


def generate_trade_history(count: int = 25, rng: random.Random | None = None) -> list[TradeResult]:
    """Mock executed trades, newest first."""
    rng = _rng(rng)
    trades: list[TradeResult] = []
    for i in range(count):
        stock = rng.choice(SAMPLE_STOCKS)
        trade_type = "BUY" if rng.random() > 0.5 else "SELL"
        price = random_price(stock.base_price, stock.volatility, rng)
        quantity = rng.randint(1, 20)
        success = rng.random() > 0.1

        profit_loss = 0.0
        if trade_type == "SELL":
            profit_loss = (price - stock.base_price * (1 - rng.random() * 0.05)) * quantity

        sentiment = "bullish" if trade_type == "BUY" else "bearish"
        trades.append(
            TradeResult(
                symbol=stock.symbol,
                trade_type=trade_type,
                price=price,
                quantity=quantity,
                # older trades spread over a wider window
                timestamp=random_timestamp(i, rng),
                success=success,
                profit_loss=profit_loss,
                reason=f"AI detected {sentiment} pattern with {rng.randint(70, 99)}% confidence",
                order_id=f"ORD{rng.randrange(10_000_000)}",
            )
        )
    trades.sort(key=lambda trade: trade.timestamp, reverse=True)
    return trades


def generate_positions(count: int = 5, rng: random.Random | None = None) -> list[PositionInfo]:
    """Mock open positions with 5% stop loss and 10% take profit."""
    rng = _rng(rng)
    positions: list[PositionInfo] = []
    for _ in range(count):
        stock = rng.choice(SAMPLE_STOCKS)
        entry_price = random_price(stock.base_price, stock.volatility * 0.5, rng)
        current_price = random_price(entry_price, stock.volatility, rng)
        quantity = rng.randint(5, 19)
        positions.append(
            PositionInfo(
                symbol=stock.symbol,
                quantity=quantity,
                entry_price=entry_price,
                current_price=current_price,
                stop_loss=entry_price * 0.95,
                take_profit=entry_price * 1.10,
                unrealized_pnl=(current_price - entry_price) * quantity,
                unrealized_pnl_percent=(current_price - entry_price) / entry_price * 100,
                entry_time=random_timestamp(5, rng),
            )
        )
    return positions


def generate_bot_statistics(config: BotConfig, rng: random.Random | None = None) -> BotStatistics:
    """Portfolio statistics derived from 50 mock trades and a few mock positions."""
    rng = _rng(rng)
    trades = generate_trade_history(50, rng)
    profits = [trade.profit_loss or 0.0 for trade in trades]
    winning = sum(1 for value in profits if value > 0)
    losing = sum(1 for value in profits if value < 0)
    total_pl = sum(profits)

    max_trades = config.max_trades_per_day or 5
    today_trades = min(rng.randrange(max_trades), max_trades - 1)

    portfolio_value = INITIAL_CAPITAL + total_pl
    positions = generate_positions(rng.randint(1, 5), rng)
    positions_value = sum(position.current_price * position.quantity for position in positions)

    return BotStatistics(
        total_trades=len(trades),
        winning_trades=winning,
        losing_trades=losing,
        win_rate=winning / (winning + losing) * 100 if winning + losing else 0.0,
        portfolio_value=portfolio_value,
        available_capital=portfolio_value - positions_value,
        total_return=total_pl,
        total_return_percent=total_pl / INITIAL_CAPITAL * 100,
        daily_trades_remaining=max_trades - today_trades,
        avg_holding_period=rng.randint(2, 25),
        most_profitable_trade=f"{max(profits, default=0.0):.2f}",
        biggest_loss=f"{min(profits, default=0.0):.2f}",
        last_updated=datetime.now(UTC),
    )


def _reasoning(action: str, rsi: float, macd: float, ema50: float, ema200: float, change_24h: float) -> list[str]:
    reasons: list[str] = []
    if rsi < 30:
        reasons.append("RSI indicates oversold conditions")
    if rsi > 70:
        reasons.append("RSI indicates overbought conditions")
    if macd > 0 and action == "BUY":
        reasons.append("MACD shows bullish momentum")
    if macd < 0 and action == "SELL":
        reasons.append("MACD shows bearish momentum")
    if ema50 > ema200 and action == "BUY":
        reasons.append("Price above 200 EMA signals uptrend")
    if ema50 < ema200 and action == "SELL":
        reasons.append("Price below 200 EMA signals downtrend")
    if change_24h > 2:
        reasons.append("Strong upward momentum in the last 24h")
    if change_24h < -2:
        reasons.append("Strong downward momentum in the last 24h")

    if len(reasons) < 2:
        if action == "BUY":
            reasons += [
                "AI pattern recognition detected potential upward movement",
                "Volume analysis suggests accumulation phase",
            ]
        elif action == "SELL":
            reasons += [
                "AI pattern recognition detected potential downward movement",
                "Volume analysis suggests distribution phase",
            ]
        else:
            reasons += [
                "Technical indicators show mixed signals",
                "Current price movement is within expected range",
            ]
    return reasons


def generate_signal(symbol: str, rng: random.Random | None = None) -> TradingSignal:
    """One mock model prediction; HOLD is the most likely action."""
    rng = _rng(rng)
    stock = find_sample_stock(symbol)
    price = random_price(stock.base_price, stock.volatility, rng)

    roll = rng.random()
    if roll > 0.7:
        action = TradeAction.BUY
        confidence = 0.7 + rng.random() * 0.25
    elif roll < 0.3:
        action = TradeAction.SELL
        confidence = 0.7 + rng.random() * 0.25
    else:
        action = TradeAction.HOLD
        confidence = 0.5 + rng.random() * 0.3

    if action is TradeAction.BUY:
        rsi = 25 + rng.random() * 15
        macd = 0.1 + rng.random() * 2
        change_24h = 0.5 + rng.random() * 3
    elif action is TradeAction.SELL:
        rsi = 70 + rng.random() * 15
        macd = -0.1 - rng.random() * 2
        change_24h = -0.5 - rng.random() * 3
    else:
        rsi = 40 + rng.random() * 20
        macd = -0.5 + rng.random()
        change_24h = -1 + rng.random() * 2

    ema50 = price * (0.9 + rng.random() * 0.2)
    ema200 = price * (0.85 + rng.random() * 0.3)

    return TradingSignal(
        symbol=symbol,
        action=action,
        price=price,
        confidence=confidence,
        timestamp=datetime.now(UTC).isoformat(),
        indicators=SignalIndicators(rsi=rsi, macd=macd, ema50=ema50, ema200=ema200, price_change_24h=change_24h),
        reasoning=_reasoning(action.value, rsi, macd, ema50, ema200, change_24h),
    )


def generate_signals(symbols: list[str], rng: random.Random | None = None) -> dict[str, TradingSignal]:
    rng = _rng(rng)
    return {symbol: generate_signal(symbol, rng) for symbol in symbols}


def demo_bot_config() -> BotConfig:
    """Configuration shown on the demo dashboard."""
    return BotConfig(
        enabled=True,
        symbols=[stock.symbol for stock in SAMPLE_STOCKS[:5]],
        trading_frequency=15,
        max_trades_per_day=10,
        investment_per_trade=5000,
        min_confidence=0.75,
        stop_loss_percent=2.5,
        take_profit_percent=5.0,
        broker_id="ZERODHA",
        risk_reward_ratio=2.0,
        use_trailing_stop=True,
        trailing_stop_percent=1.5,
        max_drawdown_percent=5.0,
        notifications_enabled=True,
    )


def generate_complete_mock_data(
    config: BotConfig, symbols: list[str], rng: random.Random | None = None
) -> dict[str, Any]:
    """Full trading bot payload in dashboard JSON form."""
    rng = _rng(rng)
    signals = generate_signals(symbols, rng)
    return {
        "isRunning": True,
        "config": config.to_json_dict(),
        "statistics": generate_bot_statistics(config, rng).to_json_dict(),
        "activePositions": [p.to_json_dict() for p in generate_positions(min(len(symbols), 3), rng)],
        "tradeHistory": [t.to_json_dict() for t in generate_trade_history(rng=rng)],
        "signals": {symbol: s.to_json_dict() for symbol, s in signals.items()},
    }


def mock_trading_bot_response(rng: random.Random | None = None) -> dict[str, Any]:
    config = demo_bot_config()
    return generate_complete_mock_data(config, config.symbols, rng)


def sample_watchlist() -> list[WatchlistEntry]:
    return [WatchlistEntry(symbol=stock.symbol, name=stock.name) for stock in SAMPLE_STOCKS]


def generate_performance_chart(days: int = 30, rng: random.Random | None = None) -> list[PerformancePoint]:
    """Daily portfolio value for ``days + 1`` days with a mid-period correction and recovery."""
    rng = _rng(rng)
    points: list[PerformancePoint] = []
    portfolio_value = INITIAL_CAPITAL
    start = (datetime.now(UTC) - timedelta(days=days)).replace(hour=0, minute=0, second=0, microsecond=0)
    midpoint = days / 2

    for i in range(days + 1):
        day = start + timedelta(days=i)
        daily_change = (rng.random() * 5 - 2) / 100

        trend_multiplier = 1.0
        if midpoint - 3 < i < midpoint + 3:
            trend_multiplier = 0.7
        if midpoint + 3 < i < midpoint + 10:
            trend_multiplier = 1.5

        portfolio_value *= 1 + daily_change * trend_multiplier

        intraday: list[IntradayPoint] = []
        intra_value = portfolio_value * 0.995
        for j in range(4):
            intra_value *= 1 + (rng.random() * 1.2 - 0.5) / 100
            stamp = day.replace(hour=9 + j * 2)
            intraday.append(IntradayPoint(timestamp=stamp.isoformat(), value=round(intra_value, 2)))

        points.append(
            PerformancePoint(date=day.date().isoformat(), value=round(portfolio_value, 2), intraday=intraday)
        )
    return points


def format_trade_history(trades: list[TradeResult], rng: random.Random | None = None) -> list[dict[str, Any]]:
    """Trade rows in the shape the history table renders."""
    rng = _rng(rng)
    return [
        FormattedTrade(
            timestamp=trade.timestamp,
            symbol=trade.symbol,
            action=trade.trade_type,
            quantity=trade.quantity,
            price=trade.price,
            total=trade.price * trade.quantity,
            status="COMPLETED" if trade.success else "FAILED",
            order_id=trade.order_id or f"ORD{rng.randrange(1_000_000)}",
            profit_loss=trade.profit_loss or 0.0,
        ).to_json_dict()
        for trade in trades
    ]
