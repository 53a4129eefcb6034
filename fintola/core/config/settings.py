"""配置管理模块 - 处理 fintola 服务的配置"""

import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

BROKER_IDS = ("ZERODHA", "UPSTOX", "ANGELONE")


@dataclass
class ServerConfig:
    """Web 服务配置"""

    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False
    app_url: str = "http://localhost:3000"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class AuthConfig:
    """身份认证配置

    mode 为 ``header`` 时信任 ``X-User-Id`` 请求头（仅用于本地开发），
    为 ``clerk`` 时通过身份提供商校验会话。
    """

    mode: str = "header"
    clerk_secret_key: str | None = None
    clerk_api_url: str = "https://api.clerk.com/v1"
    timeout: float = 10.0


@dataclass
class BrokerCredentials:
    """单个券商的 API 凭证"""

    api_key: str | None = None
    api_secret: str | None = None


@dataclass
class MarketDataConfig:
    """行情数据配置"""

    default_symbol: str = "BTC-USD"
    lookback_days: int = 365
    interval: str = "1h"


@dataclass
class TradingConfig:
    """模拟交易配置"""

    initial_capital: float = 100000.0
    simulated_latency_ms: int = 0
    history_size: int = 30


@dataclass
class LoggingConfig:
    """日志配置"""

    level: str = "INFO"
    file: str | None = None


@dataclass
class AppConfig:
    """fintola 主配置"""

    server: ServerConfig = field(default_factory=ServerConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    market_data: MarketDataConfig = field(default_factory=MarketDataConfig)
    trading: TradingConfig = field(default_factory=TradingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    brokers: dict[str, BrokerCredentials] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "AppConfig":
        """从字典创建配置"""
        brokers = {
            broker_id.upper(): BrokerCredentials(**values)
            for broker_id, values in config_dict.get("brokers", {}).items()
        }
        return cls(
            server=ServerConfig(**config_dict.get("server", {})),
            auth=AuthConfig(**config_dict.get("auth", {})),
            market_data=MarketDataConfig(**config_dict.get("market_data", {})),
            trading=TradingConfig(**config_dict.get("trading", {})),
            logging=LoggingConfig(**config_dict.get("logging", {})),
            brokers=brokers,
        )

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "server": asdict(self.server),
            "auth": asdict(self.auth),
            "market_data": asdict(self.market_data),
            "trading": asdict(self.trading),
            "logging": asdict(self.logging),
            "brokers": {broker_id: asdict(creds) for broker_id, creds in self.brokers.items()},
        }

    def broker_credentials(self, broker_id: str) -> BrokerCredentials:
        """获取券商凭证，未配置时返回空凭证"""
        return self.brokers.get(broker_id.upper(), BrokerCredentials())


def _deep_update(d: dict[str, Any], u: dict[str, Any]) -> dict[str, Any]:
    """深度更新字典"""
    for k, v in u.items():
        if isinstance(v, dict):
            d[k] = _deep_update(dict(d.get(k, {})), v)
        else:
            d[k] = v
    return d


class ConfigManager:
    """配置管理器"""

    def __init__(self, config_path: Path | None = None, use_env: bool = True):
        """初始化配置管理器

        Args:
            config_path: 配置文件路径，如果为None则使用默认路径
            use_env: 是否应用环境变量覆盖
        """
        self.config_path = config_path or Path(
            os.getenv("FINTOLA_CONFIG", str(Path.home() / ".fintola" / "config.toml"))
        )
        self.use_env = use_env
        self.config = self._load_config()

    def _load_config(self) -> AppConfig:
        """加载配置"""
        config_dict: dict[str, Any] = {}
        if self.config_path.exists():
            try:
                with open(self.config_path, "rb") as f:
                    config_dict = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                # 如果配置文件有问题，使用默认配置
                logger.warning(f"Failed to load config from {self.config_path}: {e}")
                config_dict = {}

        if self.use_env:
            _deep_update(config_dict, load_config_from_env())

        return AppConfig.from_dict(config_dict)

    def get_config(self) -> AppConfig:
        """获取当前配置"""
        return self.config

    def update_config(self, **updates: Any) -> None:
        """更新配置"""
        config_dict = _deep_update(self.config.to_dict(), updates)
        self.config = AppConfig.from_dict(config_dict)

    def save_config(self) -> None:
        """保存配置到文件（不写入券商密钥）"""
        import tomli_w

        payload = self.config.to_dict()
        payload.pop("brokers", None)
        payload["auth"].pop("clerk_secret_key", None)
        payload = _strip_none(payload)

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "wb") as f:
            tomli_w.dump(payload, f)


def _strip_none(value: Any) -> Any:
    # TOML 没有 null
    if isinstance(value, dict):
        return {k: _strip_none(v) for k, v in value.items() if v is not None}
    return value


def get_default_config() -> AppConfig:
    """获取默认配置"""
    return AppConfig()


def load_config_from_env() -> dict[str, Any]:
    """从环境变量加载配置"""
    config: dict[str, Any] = {}

    # 服务配置
    server_config: dict[str, Any] = {}
    if os.getenv("FINTOLA_HOST"):
        server_config["host"] = os.getenv("FINTOLA_HOST")
    fintola_port = os.getenv("FINTOLA_PORT")
    if fintola_port is not None:
        server_config["port"] = int(fintola_port)
    fintola_reload = os.getenv("FINTOLA_RELOAD")
    if fintola_reload is not None:
        server_config["reload"] = fintola_reload.lower() == "true"
    fintola_app_url = os.getenv("FINTOLA_APP_URL") or os.getenv("NEXT_PUBLIC_APP_URL")
    if fintola_app_url:
        server_config["app_url"] = fintola_app_url.rstrip("/")
    if server_config:
        config["server"] = server_config

    # 认证配置
    auth_config: dict[str, Any] = {}
    if os.getenv("FINTOLA_AUTH_MODE"):
        auth_config["mode"] = os.getenv("FINTOLA_AUTH_MODE", "").lower()
    if os.getenv("CLERK_SECRET_KEY"):
        auth_config["clerk_secret_key"] = os.getenv("CLERK_SECRET_KEY")
    if os.getenv("CLERK_API_URL"):
        auth_config["clerk_api_url"] = os.getenv("CLERK_API_URL")
    if auth_config:
        config["auth"] = auth_config

    # 交易配置
    trading_config: dict[str, Any] = {}
    fintola_latency = os.getenv("FINTOLA_SIMULATED_LATENCY_MS")
    if fintola_latency is not None:
        trading_config["simulated_latency_ms"] = int(fintola_latency)
    fintola_capital = os.getenv("FINTOLA_INITIAL_CAPITAL")
    if fintola_capital is not None:
        trading_config["initial_capital"] = float(fintola_capital)
    if trading_config:
        config["trading"] = trading_config

    # 日志配置
    logging_config: dict[str, Any] = {}
    if os.getenv("FINTOLA_LOGGING_LEVEL"):
        logging_config["level"] = os.getenv("FINTOLA_LOGGING_LEVEL")
    if os.getenv("FINTOLA_LOGGING_FILE"):
        logging_config["file"] = os.getenv("FINTOLA_LOGGING_FILE")
    if logging_config:
        config["logging"] = logging_config

    # 券商凭证: <BROKER>_API_KEY / <BROKER>_API_SECRET
    brokers: dict[str, Any] = {}
    for broker_id in BROKER_IDS:
        creds = {
            "api_key": os.getenv(f"{broker_id}_API_KEY"),
            "api_secret": os.getenv(f"{broker_id}_API_SECRET"),
        }
        creds = {k: v for k, v in creds.items() if v}
        if creds:
            brokers[broker_id] = creds
    if brokers:
        config["brokers"] = brokers

    return config
