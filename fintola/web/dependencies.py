"""FastAPI 依赖注入"""

from fastapi import Request

from fintola.core.auth import Authenticator, UserMetadataStore
from fintola.core.brokers import BrokerConnector
from fintola.core.config import AppConfig
from fintola.core.exceptions import AuthenticationError
from fintola.core.logging import bind
from fintola.core.market_data import PriceHistoryClient
from fintola.core.notifications import SmsSender
from fintola.core.trading import AutoTrader, get_auto_trader


def get_config(request: Request) -> AppConfig:
    """获取应用配置"""
    return request.app.state.config


def get_metadata_store(request: Request) -> UserMetadataStore:
    """获取用户元数据存储"""
    return request.app.state.metadata_store


def get_authenticator(request: Request) -> Authenticator:
    """获取请求认证器"""
    return request.app.state.authenticator


def get_broker_connector(request: Request) -> BrokerConnector:
    """获取券商连接器"""
    return request.app.state.broker_connector


def get_price_client(request: Request) -> PriceHistoryClient:
    """获取行情客户端"""
    return request.app.state.price_client


def get_sms_sender(request: Request) -> SmsSender:
    """获取短信发送器"""
    return request.app.state.sms_sender


def get_trader() -> AutoTrader:
    """获取全局 AutoTrader"""
    return get_auto_trader()


async def get_current_user(request: Request) -> str:
    """解析当前登录用户，未登录时抛出 401"""
    user_id = await get_authenticator(request).authenticate(request.headers)
    if not user_id:
        raise AuthenticationError()
    bind(user_id=user_id).debug("Request authenticated")
    return user_id
