"""Exception handling module."""

from fintola.core.exceptions.base import (
    AuthenticationError,
    AuthorizationError,
    BrokerConfigurationError,
    BrokerError,
    ChartDataError,
    ConfigurationError,
    FintolaError,
    MarketDataError,
    MetadataStoreError,
    MissingAccessTokenError,
    NotificationError,
    TokenExchangeError,
    TradingBotError,
    UnsupportedBrokerError,
    ValidationError,
)
from fintola.core.exceptions.codes import ErrorCode

__all__ = [
    "FintolaError",
    "ErrorCode",
    "ValidationError",
    "ConfigurationError",
    "AuthenticationError",
    "AuthorizationError",
    "MetadataStoreError",
    "BrokerError",
    "UnsupportedBrokerError",
    "BrokerConfigurationError",
    "TokenExchangeError",
    "MissingAccessTokenError",
    "MarketDataError",
    "ChartDataError",
    "TradingBotError",
    "NotificationError",
]
