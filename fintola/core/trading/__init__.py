"""Paper trading."""

from fintola.core.trading.auto_trader import AutoTrader, configure_auto_trader, get_auto_trader
from fintola.core.trading.bot import TradingBot, merge_config
from fintola.core.trading.feed import MarketFeed, MockMarketFeed, OrderExecutor, PaperExecutor

__all__ = [
    "AutoTrader",
    "configure_auto_trader",
    "get_auto_trader",
    "TradingBot",
    "merge_config",
    "MarketFeed",
    "MockMarketFeed",
    "OrderExecutor",
    "PaperExecutor",
]
