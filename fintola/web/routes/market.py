"""
行情与信号路由
"""

import asyncio
from typing import Any

from fastapi import APIRouter, Depends, Query

from fintola.core.chart import (
    build_overlay,
    candlestick_options,
    chart_options,
    ema_options,
    indicator_summary,
    process_chart_data,
    sma_options,
)
from fintola.core.config import AppConfig
from fintola.core.exceptions import ValidationError
from fintola.core.market_data import PriceHistoryClient
from fintola.core.mock_data import generate_signals
from fintola.web.dependencies import get_config, get_price_client

router = APIRouter()


@router.get("/finance")
async def get_finance(
    symbol: str | None = Query(None, description="行情代码，默认使用配置中的代码"),
    config: AppConfig = Depends(get_config),
    client: PriceHistoryClient = Depends(get_price_client),
) -> dict[str, Any]:
    """行情代理：返回最近一年的小时级 K 线"""
    return await client.chart(
        symbol or config.market_data.default_symbol,
        lookback_days=config.market_data.lookback_days,
        interval=config.market_data.interval,
    )


@router.get("/chart")
async def get_chart(
    symbol: str | None = Query(None, description="行情代码"),
    short: int = Query(9, ge=1, description="短周期 EMA"),
    long: int = Query(21, ge=1, description="长周期 EMA"),
    sma_period: int = Query(20, ge=1, alias="smaPeriod", description="SMA 周期"),
    ai: bool = Query(True, description="是否计算 AI 标记"),
    width: int = Query(800, ge=1, description="图表宽度"),
    config: AppConfig = Depends(get_config),
    client: PriceHistoryClient = Depends(get_price_client),
) -> dict[str, Any]:
    """K 线及指标叠加层"""
    symbol = symbol or config.market_data.default_symbol
    payload = await client.chart(
        symbol, lookback_days=config.market_data.lookback_days, interval=config.market_data.interval
    )
    candles = process_chart_data(payload)
    overlay = build_overlay(candles, short_period=short, long_period=long, sma_period=sma_period, include_ai=ai)
    return {
        "symbol": symbol,
        **overlay,
        "summary": indicator_summary(candles),
        "options": {
            "chart": chart_options(width),
            "candlestick": candlestick_options(),
            "sma": sma_options(),
            "ema": ema_options(),
        },
    }


@router.get("/ml-trading-signals")
async def get_ml_trading_signals(
    symbols: str | None = Query(None, description="逗号分隔的代码列表"),
    config: AppConfig = Depends(get_config),
) -> dict[str, Any]:
    """模拟的模型交易信号"""
    if not symbols:
        raise ValidationError("No symbols provided", field="symbols")

    names = [symbol.strip() for symbol in symbols.split(",") if symbol.strip()]
    signals = generate_signals(names)

    if config.trading.simulated_latency_ms > 0:
        await asyncio.sleep(config.trading.simulated_latency_ms / 1000)
    return {symbol: signal.to_json_dict() for symbol, signal in signals.items()}
