"""
Web API 路由模块
"""

from fintola.web.routes.auto_trader import router as auto_trader_router
from fintola.web.routes.broker import router as broker_router
from fintola.web.routes.health_routes import metrics_router
from fintola.web.routes.health_routes import router as health_router
from fintola.web.routes.market import router as market_router
from fintola.web.routes.notifications import router as notifications_router
from fintola.web.routes.trading_bot import router as trading_bot_router

__all__ = [
    "auto_trader_router",
    "broker_router",
    "health_router",
    "market_router",
    "metrics_router",
    "notifications_router",
    "trading_bot_router",
]
