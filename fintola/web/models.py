"""
Web API 数据模型
定义 FastAPI 的请求/响应模型
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import Field

from fintola.core.models import CamelModel


class APIResponse(CamelModel):
    """标准 API 响应格式"""

    success: bool = Field(..., description="请求是否成功")
    data: Any | None = Field(None, description="响应数据")
    message: str | None = Field(None, description="响应消息")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC), description="响应时间戳")
    request_id: str | None = Field(None, description="请求ID，用于追踪")


class ErrorResponse(CamelModel):
    """错误响应格式"""

    success: bool = Field(False, description="请求失败")
    error: str = Field(..., description="错误消息")
    code: str = Field(..., description="错误码")
    details: dict[str, Any] | None = Field(None, description="详细错误信息")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC), description="错误时间戳")
    request_id: str | None = Field(None, description="请求ID，用于追踪")


class BotControlRequest(CamelModel):
    """交易机器人启停请求"""

    action: str | None = Field(None, description="start 或 stop")


class BotConfigRequest(CamelModel):
    """交易机器人配置更新请求"""

    config: dict[str, Any] | None = Field(None, description="机器人配置")


class AutoTraderRequest(CamelModel):
    """自动交易控制请求"""

    action: str | None = Field(None, description="start/stop/update/addSymbols/removeSymbol")
    config: dict[str, Any] | None = Field(None, description="部分 AutoTrader 配置")
    symbols: Any | None = Field(None, description="addSymbols 使用的代码列表")
    symbol: str | None = Field(None, description="removeSymbol 使用的代码")


class BrokerConnectRequest(CamelModel):
    """券商连接请求"""

    broker_id: str | None = Field(None, description="ZERODHA、UPSTOX 或 ANGELONE")


class SendSmsRequest(CamelModel):
    """短信发送请求"""

    phone_number: str | None = Field(None, description="接收号码")
    message: str | None = Field(None, description="短信内容")
