"""标准化错误代码."""

from enum import Enum


class ErrorCode(str, Enum):
    """fintola 错误代码枚举."""

    GENERAL_ERROR = "GENERAL_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # 认证和授权
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    AUTHORIZATION_ERROR = "AUTHORIZATION_ERROR"

    # 用户元数据存储
    METADATA_STORE_ERROR = "METADATA_STORE_ERROR"

    # 券商连接
    BROKER_ERROR = "BROKER_ERROR"
    BROKER_NOT_SUPPORTED = "BROKER_NOT_SUPPORTED"
    BROKER_NOT_CONFIGURED = "BROKER_NOT_CONFIGURED"
    TOKEN_EXCHANGE_ERROR = "TOKEN_EXCHANGE_ERROR"

    # 行情与图表
    MARKET_DATA_ERROR = "MARKET_DATA_ERROR"
    CHART_DATA_ERROR = "CHART_DATA_ERROR"

    # 自动交易
    TRADING_BOT_ERROR = "TRADING_BOT_ERROR"

    # 通知
    NOTIFICATION_ERROR = "NOTIFICATION_ERROR"
