"""Configuration management."""

from fintola.core.config.settings import (
    BROKER_IDS,
    AppConfig,
    AuthConfig,
    BrokerCredentials,
    ConfigManager,
    LoggingConfig,
    MarketDataConfig,
    ServerConfig,
    TradingConfig,
    get_default_config,
    load_config_from_env,
)

__all__ = [
    "BROKER_IDS",
    "AppConfig",
    "AuthConfig",
    "BrokerCredentials",
    "ConfigManager",
    "LoggingConfig",
    "MarketDataConfig",
    "ServerConfig",
    "TradingConfig",
    "get_default_config",
    "load_config_from_env",
]
