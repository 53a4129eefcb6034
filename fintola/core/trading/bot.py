"""Paper-trading bot driven by model signals.

The bot keeps positions, capital and trade history in memory. It sizes
positions from a per-trade risk budget, exits on stop loss or take profit
and can trail the stop upward.
"""

from __future__ import annotations

import asyncio
import math
from datetime import datetime
from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from fintola.core.exceptions import ValidationError
from fintola.core.models import (
    BotConfig,
    BotStatistics,
    PositionInfo,
    TradeAction,
    TradeResult,
    TradingSignal,
    snake_to_camel,
)
from fintola.core.monitoring import get_metrics_collector
from fintola.core.trading.feed import MarketFeed, MockMarketFeed, OrderExecutor, PaperExecutor


def merge_config(config: BotConfig, updates: dict[str, Any] | BotConfig) -> BotConfig:
    """Return ``config`` with ``updates`` applied; keys may be camelCase or snake_case."""
    if isinstance(updates, BotConfig):
        updates = updates.model_dump(by_alias=True, exclude_unset=True)
    merged = {**config.model_dump(by_alias=True), **{snake_to_camel(k): v for k, v in updates.items()}}
    try:
        return type(config).model_validate(merged)
    except PydanticValidationError as e:
        raise ValidationError("Invalid trading bot configuration", details={"errors": e.errors()}) from e


class TradingBot:
    """In-memory paper trading bot."""

    def __init__(
        self,
        config: BotConfig | None = None,
        feed: MarketFeed | None = None,
        executor: OrderExecutor | None = None,
    ) -> None:
        self.config = config or BotConfig()
        self.feed = feed or MockMarketFeed()
        self.executor = executor or PaperExecutor()

        self.is_initialized = False
        self.is_running = False
        self._task: asyncio.Task[None] | None = None

        self.recent_signals: dict[str, TradingSignal] = {}
        self.active_positions: dict[str, PositionInfo] = {}
        self.trade_history: list[TradeResult] = []
        self.daily_trade_count = 0
        self.last_trade_reset = datetime.min
        self.total_capital = 0.0
        self.available_capital = 0.0
        self._peak_value = 0.0

    async def initialize(self, initial_capital: float) -> bool:
        """Set the starting capital. Fails when trading is enabled without a broker.

        A bot that has already traded keeps its capital, positions and history.
        """
        if self.config.enabled and not self.config.broker_id:
            logger.error("Broker ID is required for automated trading")
            return False

        if self.is_initialized and (self.active_positions or self.trade_history):
            logger.info("TradingBot already trading, keeping capital", available_capital=self.available_capital)
            return True

        self.total_capital = initial_capital
        self.available_capital = initial_capital
        self._peak_value = initial_capital
        self.last_trade_reset = datetime.now()
        self.is_initialized = True
        logger.info("TradingBot initialized", initial_capital=initial_capital)
        return True

    def start(self) -> bool:
        """Start trading; cycles run in the background when an event loop is available."""
        if not self.is_initialized:
            logger.error("TradingBot not initialized, call initialize() first")
            return False
        if self.is_running:
            logger.warning("TradingBot is already running")
            return True

        self._reset_daily_trade_count_if_needed()
        self.is_running = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            self._task = loop.create_task(self._run_loop())
        logger.info("Automated trading started", symbols=self.config.symbols)
        return True

    def stop(self) -> bool:
        if not self.is_running:
            logger.warning("TradingBot is not running")
            return True

        if self._task is not None:
            self._task.cancel()
            self._task = None
        self.is_running = False
        logger.info("Automated trading stopped")
        return True

    def update_config(self, updates: dict[str, Any] | BotConfig) -> None:
        """Apply a partial configuration; a frequency change restarts the schedule."""
        old_frequency = self.config.trading_frequency
        self.config = merge_config(self.config, updates)
        if self.is_running and old_frequency != self.config.trading_frequency:
            self.stop()
            self.start()

    async def _run_loop(self) -> None:
        while self.is_running:
            await self.run_cycle()
            await asyncio.sleep(self.config.trading_frequency * 60)

    async def run_cycle(self) -> list[TradeResult]:
        """One trading pass: manage open positions, then act on fresh signals.

        Errors are logged and end the cycle; the schedule keeps running.
        """
        metrics = get_metrics_collector()
        executed: list[TradeResult] = []
        try:
            self._reset_daily_trade_count_if_needed()
            if self.daily_trade_count >= self.config.max_trades_per_day:
                logger.info("Maximum daily trades reached, waiting for next reset")
                metrics.record_bot_cycle("skipped")
                return executed

            signals = await self.feed.get_signals(self.config.symbols)
            executed.extend(await self.manage_positions())

            for symbol, signal in signals.items():
                self.recent_signals[symbol] = signal
                if self.daily_trade_count >= self.config.max_trades_per_day:
                    break
                if signal.action is TradeAction.HOLD or signal.confidence < self.config.min_confidence:
                    continue

                if signal.action is TradeAction.SELL:
                    position = self.active_positions.get(symbol)
                    if position is not None:
                        result = await self._close_position(position, signal.price, "Model sell signal")
                        if result is not None:
                            executed.append(result)
                    continue

                if symbol in self.active_positions:
                    continue
                result = await self._open_position(signal)
                if result is not None:
                    executed.append(result)

            metrics.record_bot_cycle("completed")
        except Exception as e:
            logger.error(f"Error in trading cycle: {e}")
            metrics.record_bot_cycle("failed")
        return executed

    async def _open_position(self, signal: TradingSignal) -> TradeResult | None:
        quantity = self.calculate_position_size(signal)
        if quantity <= 0:
            return None

        result = await self.executor.execute(
            signal.symbol, TradeAction.BUY.value, quantity, signal.price, reason="; ".join(signal.reasoning) or None
        )
        if not result.success:
            logger.warning("Order rejected", symbol=signal.symbol, message=result.message)
            return None

        self.daily_trade_count += 1
        self.trade_history.append(result)
        self.active_positions[signal.symbol] = PositionInfo(
            symbol=signal.symbol,
            quantity=quantity,
            entry_price=result.price,
            entry_time=result.timestamp,
            current_price=result.price,
            stop_loss=self.calculate_stop_loss(signal, result.price),
            take_profit=self.calculate_take_profit(signal, result.price),
        )
        self.available_capital -= result.price * quantity
        get_metrics_collector().record_bot_trade(TradeAction.BUY.value)
        if self.config.notifications_enabled:
            logger.info(f"BUY order executed for {signal.symbol} at {result.price:.2f}")
        return result

    async def _close_position(self, position: PositionInfo, price: float, reason: str) -> TradeResult | None:
        result = await self.executor.execute(
            position.symbol, TradeAction.SELL.value, position.quantity, price, reason=reason
        )
        if not result.success:
            logger.warning("Exit order rejected", symbol=position.symbol, reason=reason)
            return None

        result.profit_loss = (result.price - position.entry_price) * position.quantity
        self.available_capital += result.price * position.quantity
        del self.active_positions[position.symbol]
        self.trade_history.append(result)
        get_metrics_collector().record_bot_trade(TradeAction.SELL.value)
        if self.config.notifications_enabled:
            logger.info(f"{reason} for {position.symbol}: SELL at {result.price:.2f}")
        return result

    async def manage_positions(self) -> list[TradeResult]:
        """Refresh prices, trail stops and exit positions that hit a limit."""
        exits: list[TradeResult] = []
        for symbol, position in list(self.active_positions.items()):
            try:
                current_price = await self.feed.get_price(symbol)
                if not current_price:
                    continue

                position.current_price = current_price
                position.unrealized_pnl = (current_price - position.entry_price) * position.quantity
                position.unrealized_pnl_percent = (current_price - position.entry_price) / position.entry_price * 100

                exit_reason = None
                if current_price <= position.stop_loss:
                    exit_reason = "Stop loss triggered"
                if current_price >= position.take_profit:
                    exit_reason = "Take profit triggered"

                # stop only ever moves up
                if self.config.use_trailing_stop and current_price > position.entry_price:
                    trailed = current_price * (1 - self.config.trailing_stop_percent / 100)
                    if trailed > position.stop_loss:
                        position.stop_loss = trailed

                if exit_reason:
                    result = await self._close_position(position, current_price, exit_reason)
                    if result is not None:
                        exits.append(result)
            except Exception as e:
                logger.error(f"Error managing position for {symbol}: {e}")
        return exits

    def calculate_position_size(self, signal: TradingSignal) -> int:
        """Shares to buy under the per-trade risk budget, investment cap and free capital."""
        price = signal.price
        if price <= 0 or self.config.max_trades_per_day <= 0:
            return 0

        max_risk = self.total_capital * (self.config.max_drawdown_percent / 100) / self.config.max_trades_per_day
        risk_per_share = abs(price - self.calculate_stop_loss(signal, price))
        if risk_per_share <= 0:
            return 0

        size = min(math.floor(max_risk / risk_per_share), math.floor(self.config.investment_per_trade / price))
        if size * price > self.available_capital:
            return max(0, math.floor(self.available_capital / price))
        return max(0, size)

    def calculate_stop_loss(self, signal: TradingSignal, entry_price: float) -> float:
        if signal.stop_loss:
            return signal.stop_loss
        if signal.action is TradeAction.BUY:
            return entry_price * (1 - self.config.stop_loss_percent / 100)
        return entry_price * (1 + self.config.stop_loss_percent / 100)

    def calculate_take_profit(self, signal: TradingSignal, entry_price: float) -> float:
        if signal.price_target:
            return signal.price_target
        if signal.action is TradeAction.BUY:
            return entry_price * (1 + self.config.take_profit_percent / 100)
        return entry_price * (1 - self.config.take_profit_percent / 100)

    def _reset_daily_trade_count_if_needed(self) -> None:
        midnight = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
        if self.last_trade_reset < midnight:
            self.daily_trade_count = 0
            self.last_trade_reset = datetime.now()
            logger.debug("Reset daily trade counter")

    def get_trade_history(self) -> list[TradeResult]:
        return list(self.trade_history)

    def get_active_positions(self) -> list[PositionInfo]:
        return list(self.active_positions.values())

    def get_statistics(self) -> BotStatistics:
        closed = [t for t in self.trade_history if t.success and t.trade_type == TradeAction.SELL.value]
        winning = sum(1 for t in closed if (t.profit_loss or 0) > 0)
        losing = len(closed) - winning

        positions_value = sum(p.current_price * p.quantity for p in self.active_positions.values())
        portfolio_value = self.available_capital + positions_value
        self._peak_value = max(self._peak_value, portfolio_value)

        total_return = portfolio_value - self.total_capital
        return BotStatistics(
            total_trades=len(self.trade_history),
            winning_trades=winning,
            losing_trades=losing,
            win_rate=winning / len(closed) * 100 if closed else 0.0,
            portfolio_value=portfolio_value,
            available_capital=self.available_capital,
            total_return=total_return,
            total_return_percent=total_return / self.total_capital * 100 if self.total_capital else 0.0,
            daily_trades_remaining=max(0, self.config.max_trades_per_day - self.daily_trade_count),
            drawdown_percent=(self._peak_value - portfolio_value) / self._peak_value * 100 if self._peak_value else 0.0,
            last_updated=datetime.now(),
        )
