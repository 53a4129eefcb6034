"""
自动交易路由

仅对高级会员开放，控制进程内的 AutoTrader 并把状态写回用户元数据。
"""

from typing import Any

from fastapi import APIRouter, Depends
from loguru import logger

from fintola.core.auth import UserMetadataStore, get_user_metadata, update_user_metadata
from fintola.core.exceptions import AuthorizationError, TradingBotError, ValidationError
from fintola.core.trading import AutoTrader
from fintola.web.dependencies import get_current_user, get_metadata_store, get_trader
from fintola.web.models import AutoTraderRequest

router = APIRouter()


async def require_premium_user(
    user_id: str = Depends(get_current_user),
    store: UserMetadataStore = Depends(get_metadata_store),
) -> str:
    """校验高级会员身份"""
    metadata = await get_user_metadata(store, user_id)
    if not metadata.get("isPremiumUser"):
        raise AuthorizationError("Premium subscription required for automated trading", user_id=user_id)
    return user_id


@router.get("/auto-trader")
async def get_auto_trader_status(
    user_id: str = Depends(require_premium_user),
    trader: AutoTrader = Depends(get_trader),
) -> dict[str, Any]:
    """获取 AutoTrader 状态"""
    return trader.get_status()


@router.post("/auto-trader")
async def control_auto_trader(
    body: AutoTraderRequest,
    user_id: str = Depends(require_premium_user),
    store: UserMetadataStore = Depends(get_metadata_store),
    trader: AutoTrader = Depends(get_trader),
) -> dict[str, Any]:
    """执行 start/stop/update/addSymbols/removeSymbol 操作并返回最新状态"""
    action = body.action
    if not action:
        raise ValidationError("Action is required", field="action")

    if action == "start":
        if not trader.is_running:
            if body.config:
                trader.update_config(body.config)
            if not await trader.initialize() or not trader.start():
                raise TradingBotError("Failed to start AutoTrader")
            await update_user_metadata(
                store, user_id, {"autoTraderEnabled": True, "autoTraderConfig": trader.config.to_json_dict()}
            )

    elif action == "stop":
        if trader.is_running:
            trader.stop()
            await update_user_metadata(store, user_id, {"autoTraderEnabled": False})

    elif action == "update":
        if not body.config:
            raise ValidationError("Config is required for update action", field="config")
        trader.update_config(body.config)
        await update_user_metadata(store, user_id, {"autoTraderConfig": trader.config.to_json_dict()})

    elif action == "addSymbols":
        if not isinstance(body.symbols, list):
            raise ValidationError("Symbols array is required for addSymbols action", field="symbols")
        trader.add_symbols([str(symbol) for symbol in body.symbols])
        await update_user_metadata(store, user_id, {"autoTraderConfig": trader.config.to_json_dict()})

    elif action == "removeSymbol":
        if not body.symbol:
            raise ValidationError("Symbol is required for removeSymbol action", field="symbol")
        trader.remove_symbol(body.symbol)
        await update_user_metadata(store, user_id, {"autoTraderConfig": trader.config.to_json_dict()})

    else:
        raise ValidationError(f"Unknown action: {action}", field="action")

    logger.info("AutoTrader action handled", action=action, user_id=user_id)
    return trader.get_status()
