"""Signal/price sources and order execution for paper trading."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from datetime import UTC, datetime

from loguru import logger

from fintola.core.mock_data import find_sample_stock, generate_signals, random_price
from fintola.core.models import TradeResult, TradingSignal


class MarketFeed(ABC):
    """Source of model predictions and current prices."""

    @abstractmethod
    async def get_signals(self, symbols: list[str]) -> dict[str, TradingSignal]: ...

    @abstractmethod
    async def get_price(self, symbol: str) -> float | None: ...


class OrderExecutor(ABC):
    """Places market orders."""

    @abstractmethod
    async def execute(
        self,
        symbol: str,
        action: str,
        quantity: int,
        price: float,
        reason: str | None = None,
    ) -> TradeResult: ...


class MockMarketFeed(MarketFeed):
    """Random signals and prices around the sample stock base prices."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    async def get_signals(self, symbols: list[str]) -> dict[str, TradingSignal]:
        return generate_signals(symbols, self._rng)

    async def get_price(self, symbol: str) -> float | None:
        stock = find_sample_stock(symbol)
        return random_price(stock.base_price, stock.volatility, self._rng)


class PaperExecutor(OrderExecutor):
    """Fills every market order in full at the quoted price."""

    def __init__(self) -> None:
        self._sequence = 0

    async def execute(
        self,
        symbol: str,
        action: str,
        quantity: int,
        price: float,
        reason: str | None = None,
    ) -> TradeResult:
        self._sequence += 1
        order_id = f"PAPER{self._sequence:06d}"
        logger.info(
            "Paper order filled",
            symbol=symbol,
            action=action,
            quantity=quantity,
            price=price,
            order_id=order_id,
        )
        return TradeResult(
            symbol=symbol,
            trade_type=action,
            price=price,
            quantity=quantity,
            timestamp=int(datetime.now(UTC).timestamp() * 1000),
            success=True,
            reason=reason,
            message="Order executed",
            order_id=order_id,
        )
