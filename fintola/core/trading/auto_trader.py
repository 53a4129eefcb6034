"""Automated trading on top of :class:`TradingBot`.

The AutoTrader owns the bot, periodically reviews its performance and
tightens the configuration when trading goes badly.
"""

from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger

from fintola.core.models import AutoTraderConfig
from fintola.core.trading.bot import TradingBot, merge_config
from fintola.core.trading.feed import MarketFeed, OrderExecutor

STATUS_CHECK_INTERVAL_SECONDS = 5 * 60
MIN_WIN_RATE = 40.0
MAX_MIN_CONFIDENCE = 0.9
CONFIDENCE_STEP = 0.05
MAX_DRAWDOWN_BEFORE_THROTTLE = 3.0


class AutoTrader:
    """Fully automated paper trader."""

    def __init__(
        self,
        config: AutoTraderConfig | dict[str, Any] | None = None,
        feed: MarketFeed | None = None,
        executor: OrderExecutor | None = None,
    ) -> None:
        if isinstance(config, dict):
            config = merge_config(AutoTraderConfig(), config)
        self.config: AutoTraderConfig = config or AutoTraderConfig()
        self.bot = TradingBot(self.config, feed=feed, executor=executor)
        self.is_running = False
        self._status_task: asyncio.Task[None] | None = None

    async def initialize(self) -> bool:
        logger.info("Initializing AutoTrader")
        if not await self.bot.initialize(self.config.initial_capital):
            logger.error("Failed to initialize AutoTrader: trading bot initialization failed")
            return False

        if self.config.auto_run:
            self.start()
        logger.info("AutoTrader initialized successfully")
        return True

    def start(self) -> bool:
        if self.is_running:
            logger.warning("AutoTrader is already running")
            return True

        if not self.bot.start():
            logger.error("Failed to start AutoTrader: trading bot did not start")
            return False

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            self._status_task = loop.create_task(self._status_loop())

        self.is_running = True
        if self.config.notifications_enabled:
            logger.info(f"AutoTrader started successfully with {len(self.config.symbols)} symbols")
        return True

    def stop(self) -> bool:
        if not self.is_running:
            logger.warning("AutoTrader is not running")
            return True

        self.bot.stop()
        if self._status_task is not None:
            self._status_task.cancel()
            self._status_task = None

        self.is_running = False
        if self.config.notifications_enabled:
            logger.info("AutoTrader stopped successfully")
        return True

    def update_config(self, updates: dict[str, Any] | AutoTraderConfig) -> None:
        """Merge ``updates``; a running trader restarts if it is still enabled."""
        new_config = merge_config(self.config, updates)

        was_running = self.is_running
        if was_running:
            self.stop()

        self.config = new_config
        self.bot.update_config(self.config)

        if was_running and self.config.enabled:
            self.start()

    def add_symbols(self, symbols: list[str]) -> None:
        self.update_config({"symbols": list(dict.fromkeys([*self.config.symbols, *symbols]))})

    def remove_symbol(self, symbol: str) -> None:
        self.update_config({"symbols": [s for s in self.config.symbols if s != symbol]})

    async def _status_loop(self) -> None:
        while True:
            await asyncio.sleep(STATUS_CHECK_INTERVAL_SECONDS)
            self.check_status()

    def check_status(self) -> None:
        """Log a status summary and adapt the configuration to recent performance."""
        statistics = self.bot.get_statistics()
        logger.info(
            "AutoTrader status",
            running=self.is_running,
            symbols=len(self.config.symbols),
            portfolio_value=round(statistics.portfolio_value, 2),
            total_return_percent=round(statistics.total_return_percent, 2),
        )

        closed_trades = statistics.winning_trades + statistics.losing_trades
        if closed_trades and statistics.win_rate < MIN_WIN_RATE and self.config.min_confidence < MAX_MIN_CONFIDENCE:
            self.update_config(
                {"min_confidence": round(min(self.config.min_confidence + CONFIDENCE_STEP, MAX_MIN_CONFIDENCE), 4)}
            )
            logger.info(f"Adjusted min confidence to {self.config.min_confidence} due to low win rate")

        if statistics.drawdown_percent > MAX_DRAWDOWN_BEFORE_THROTTLE and self.config.max_trades_per_day > 1:
            self.update_config({"max_trades_per_day": self.config.max_trades_per_day - 1})
            logger.info(f"Reduced max trades to {self.config.max_trades_per_day} due to high drawdown")

    def get_status(self) -> dict[str, Any]:
        """Status payload with camelCase keys."""
        return {
            "isRunning": self.is_running,
            "config": self.config.to_json_dict(),
            "statistics": self.bot.get_statistics().to_json_dict(),
            "activePositions": [p.to_json_dict() for p in self.bot.get_active_positions()],
            "tradeHistory": [t.to_json_dict() for t in self.bot.get_trade_history()],
        }


_AUTO_TRADER: AutoTrader | None = None


def get_auto_trader() -> AutoTrader:
    """Return the process-wide AutoTrader."""
    global _AUTO_TRADER
    if _AUTO_TRADER is None:
        _AUTO_TRADER = AutoTrader()
    return _AUTO_TRADER


def configure_auto_trader(trader: AutoTrader | None) -> None:
    """Replace the process-wide AutoTrader, mainly for tests."""
    global _AUTO_TRADER
    _AUTO_TRADER = trader
