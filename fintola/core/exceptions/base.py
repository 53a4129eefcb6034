"""fintola核心异常类."""

from typing import Any

from fintola.core.exceptions.codes import ErrorCode


class FintolaError(Exception):
    """fintola基础异常类."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode | str = ErrorCode.GENERAL_ERROR,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
    ):
        """初始化异常.

        Args:
            message: 错误消息
            error_code: 错误代码
            details: 额外详情
            status_code: 覆盖默认的 HTTP 状态码
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code.value if isinstance(error_code, ErrorCode) else error_code
        self.details = dict(details or {})
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> dict[str, Any]:
        """返回可序列化的错误描述."""
        return {
            "error": self.message,
            "code": self.error_code,
            "details": dict(self.details),
        }


class ValidationError(FintolaError):
    """请求参数验证异常."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        super_details = dict(details or {})
        if field:
            super_details["field"] = field
        super().__init__(message, ErrorCode.VALIDATION_ERROR, super_details)
        self.field = field


class ConfigurationError(FintolaError):
    """配置缺失或无效."""

    status_code = 500

    def __init__(self, message: str, setting: str | None = None, details: dict[str, Any] | None = None):
        super_details = dict(details or {})
        if setting:
            super_details["setting"] = setting
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, super_details)


class AuthenticationError(FintolaError):
    """认证异常."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized", details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.AUTHENTICATION_ERROR, details)


class AuthorizationError(FintolaError):
    """权限不足异常."""

    status_code = 403

    def __init__(self, message: str, user_id: str | None = None, details: dict[str, Any] | None = None):
        super_details = dict(details or {})
        if user_id:
            super_details["user_id"] = user_id
        super().__init__(message, ErrorCode.AUTHORIZATION_ERROR, super_details)


class MetadataStoreError(FintolaError):
    """用户元数据存储异常."""

    def __init__(
        self,
        message: str,
        user_id: str | None = None,
        status: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = dict(details or {})
        if user_id:
            super_details["user_id"] = user_id
        if status is not None:
            super_details["upstream_status"] = status
        super().__init__(message, ErrorCode.METADATA_STORE_ERROR, super_details)


class BrokerError(FintolaError):
    """券商相关异常."""

    def __init__(
        self,
        message: str,
        broker_id: str | None,
        error_code: ErrorCode = ErrorCode.BROKER_ERROR,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
    ):
        super_details = dict(details or {})
        if broker_id:
            super_details["broker_id"] = broker_id
        super().__init__(message, error_code, super_details, status_code)
        self.broker_id = broker_id


class UnsupportedBrokerError(BrokerError):
    """不支持的券商."""

    status_code = 400

    def __init__(self, broker_id: str | None, message: str = "Invalid broker specified"):
        super().__init__(message, broker_id, ErrorCode.BROKER_NOT_SUPPORTED)


class BrokerConfigurationError(BrokerError):
    """券商 API 凭证未配置."""

    status_code = 500

    def __init__(self, broker_id: str, message: str = "Broker API key not configured"):
        super().__init__(message, broker_id, ErrorCode.BROKER_NOT_CONFIGURED)


class TokenExchangeError(BrokerError):
    """授权码换取访问令牌失败."""

    status_code = 502

    def __init__(
        self,
        message: str,
        broker_id: str,
        upstream_status: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = dict(details or {})
        if upstream_status is not None:
            super_details["upstream_status"] = upstream_status
        super().__init__(message, broker_id, ErrorCode.TOKEN_EXCHANGE_ERROR, super_details)


class MissingAccessTokenError(TokenExchangeError):
    """券商令牌响应中缺少 access_token."""

    def __init__(self, broker_id: str, message: str = "Failed to get access token"):
        super().__init__(message, broker_id)


class MarketDataError(FintolaError):
    """行情数据获取异常."""

    def __init__(self, message: str, symbol: str | None = None, details: dict[str, Any] | None = None):
        super_details = dict(details or {})
        if symbol:
            super_details["symbol"] = symbol
        super().__init__(message, ErrorCode.MARKET_DATA_ERROR, super_details)


class ChartDataError(FintolaError):
    """图表数据格式异常."""

    status_code = 422

    def __init__(self, message: str = "Unexpected data format", details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.CHART_DATA_ERROR, details)


class TradingBotError(FintolaError):
    """自动交易机器人异常."""

    def __init__(self, message: str, details: dict[str, Any] | None = None, status_code: int | None = None):
        super().__init__(message, ErrorCode.TRADING_BOT_ERROR, details, status_code)


class NotificationError(FintolaError):
    """通知发送异常."""

    def __init__(self, message: str, channel: str = "sms", details: dict[str, Any] | None = None):
        super_details = dict(details or {})
        super_details["channel"] = channel
        super().__init__(message, ErrorCode.NOTIFICATION_ERROR, super_details)
