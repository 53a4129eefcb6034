"""
交易机器人看板路由

机器人本身不运行，看板只展示模拟数据；启停状态保存在进程内存中。
"""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Request
from loguru import logger

from fintola.core.config import AppConfig
from fintola.core.exceptions import TradingBotError
from fintola.core.mock_data import (
    format_trade_history,
    generate_performance_chart,
    generate_trade_history,
    mock_trading_bot_response,
)
from fintola.web.dependencies import get_config
from fintola.web.models import BotConfigRequest, BotControlRequest

router = APIRouter()


@dataclass
class BotState:
    """看板中的机器人启停状态"""

    is_running: bool = False
    last_config_update: datetime | None = None
    start_time: datetime | None = None
    stop_time: datetime | None = None


def get_bot_state(request: Request) -> BotState:
    return request.app.state.bot_state


@router.get("/trading-bot")
async def get_trading_bot(state: BotState = Depends(get_bot_state)) -> dict[str, Any]:
    """获取机器人状态、模拟统计数据以及 30 天收益曲线"""
    try:
        response = mock_trading_bot_response()
        response["isRunning"] = state.is_running
        response["performanceChart"] = [point.to_json_dict() for point in generate_performance_chart(30)]
        return response
    except Exception as e:
        logger.error(f"Error in trading bot API: {e}")
        raise TradingBotError("Failed to get trading bot status") from e


@router.post("/trading-bot")
async def update_trading_bot(
    body: BotConfigRequest, state: BotState = Depends(get_bot_state)
) -> dict[str, Any]:
    """记录机器人配置更新时间"""
    if body.config:
        state.last_config_update = datetime.now(UTC)
        logger.info("Trading bot configuration updated", keys=sorted(body.config))
    return {"success": True, "message": "Trading bot configuration updated successfully"}


@router.put("/trading-bot")
async def control_trading_bot(
    body: BotControlRequest, state: BotState = Depends(get_bot_state)
) -> dict[str, Any]:
    """启动或停止机器人，其他 action 不改变状态"""
    if body.action == "start":
        state.is_running = True
        state.start_time = datetime.now(UTC)
        state.stop_time = None
    elif body.action == "stop":
        state.is_running = False
        state.stop_time = datetime.now(UTC)

    return {
        "success": True,
        "isRunning": state.is_running,
        "message": f"Trading bot {'started' if state.is_running else 'stopped'} successfully",
    }


@router.get("/trading-history")
async def get_trading_history(config: AppConfig = Depends(get_config)) -> dict[str, Any]:
    """获取模拟成交记录"""
    try:
        trades = format_trade_history(generate_trade_history(config.trading.history_size))
    except Exception as e:
        logger.error(f"Error fetching trade history: {e}")
        raise TradingBotError("Failed to fetch trade history") from e

    if config.trading.simulated_latency_ms > 0:
        await asyncio.sleep(config.trading.simulated_latency_ms / 1000)
    return {"success": True, "trades": trades}
