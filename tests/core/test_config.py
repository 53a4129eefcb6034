"""
Tests for configuration management.

Covers defaults, TOML loading, environment overrides and saving.
"""

import tomllib

import pytest

from fintola.core.config import (
    AppConfig,
    BrokerCredentials,
    ConfigManager,
    get_default_config,
    load_config_from_env,
)

_ENV_VARS = (
    "FINTOLA_HOST",
    "FINTOLA_PORT",
    "FINTOLA_RELOAD",
    "FINTOLA_APP_URL",
    "NEXT_PUBLIC_APP_URL",
    "FINTOLA_AUTH_MODE",
    "CLERK_SECRET_KEY",
    "CLERK_API_URL",
    "FINTOLA_SIMULATED_LATENCY_MS",
    "FINTOLA_INITIAL_CAPITAL",
    "FINTOLA_LOGGING_LEVEL",
    "FINTOLA_LOGGING_FILE",
    "ZERODHA_API_KEY",
    "ZERODHA_API_SECRET",
    "UPSTOX_API_KEY",
    "UPSTOX_API_SECRET",
    "ANGELONE_API_KEY",
    "ANGELONE_API_SECRET",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestAppConfig:
    """Test AppConfig model."""

    def test_defaults(self):
        config = get_default_config()

        assert config.server.port == 8000
        assert config.server.app_url == "http://localhost:3000"
        assert config.auth.mode == "header"
        assert config.market_data.default_symbol == "BTC-USD"
        assert config.trading.history_size == 30
        assert config.trading.simulated_latency_ms == 0
        assert config.brokers == {}

    def test_from_dict_normalises_broker_ids(self):
        config = AppConfig.from_dict({"brokers": {"zerodha": {"api_key": "k"}}, "server": {"port": 9000}})

        assert config.server.port == 9000
        assert config.broker_credentials("ZERODHA").api_key == "k"
        assert config.broker_credentials("zerodha").api_key == "k"

    def test_unknown_broker_has_empty_credentials(self):
        assert AppConfig().broker_credentials("UPSTOX") == BrokerCredentials()

    def test_round_trip_through_dict(self):
        config = AppConfig.from_dict({"brokers": {"UPSTOX": {"api_key": "k", "api_secret": "s"}}})
        assert AppConfig.from_dict(config.to_dict()) == config


class TestEnvironment:
    """Test environment variable overrides."""

    def test_empty_environment(self, clean_env):
        assert load_config_from_env() == {}

    def test_values_are_parsed(self, clean_env):
        clean_env.setenv("FINTOLA_PORT", "9001")
        clean_env.setenv("FINTOLA_RELOAD", "TRUE")
        clean_env.setenv("NEXT_PUBLIC_APP_URL", "https://tradex.example.com/")
        clean_env.setenv("FINTOLA_AUTH_MODE", "Clerk")
        clean_env.setenv("CLERK_SECRET_KEY", "sk_live")
        clean_env.setenv("FINTOLA_SIMULATED_LATENCY_MS", "250")
        clean_env.setenv("ZERODHA_API_KEY", "kite")

        env = load_config_from_env()

        assert env["server"] == {"port": 9001, "reload": True, "app_url": "https://tradex.example.com"}
        assert env["auth"] == {"mode": "clerk", "clerk_secret_key": "sk_live"}
        assert env["trading"] == {"simulated_latency_ms": 250}
        assert env["brokers"] == {"ZERODHA": {"api_key": "kite"}}

    def test_fintola_app_url_wins(self, clean_env):
        clean_env.setenv("FINTOLA_APP_URL", "https://a.example.com")
        clean_env.setenv("NEXT_PUBLIC_APP_URL", "https://b.example.com")
        assert load_config_from_env()["server"]["app_url"] == "https://a.example.com"


class TestConfigManager:
    """Test ConfigManager."""

    def test_missing_file_uses_defaults(self, tmp_path, clean_env):
        manager = ConfigManager(tmp_path / "missing.toml")
        assert manager.get_config() == AppConfig()

    def test_loads_toml_and_applies_env(self, tmp_path, clean_env):
        path = tmp_path / "config.toml"
        path.write_text(
            '[server]\nport = 7000\napp_url = "https://file.example.com"\n\n[trading]\nhistory_size = 10\n',
            encoding="utf-8",
        )
        clean_env.setenv("FINTOLA_PORT", "7001")

        config = ConfigManager(path).get_config()

        assert config.server.port == 7001
        assert config.server.app_url == "https://file.example.com"
        assert config.trading.history_size == 10

    def test_env_can_be_disabled(self, tmp_path, clean_env):
        clean_env.setenv("FINTOLA_PORT", "7001")
        assert ConfigManager(tmp_path / "none.toml", use_env=False).get_config().server.port == 8000

    def test_invalid_toml_falls_back_to_defaults(self, tmp_path, clean_env):
        path = tmp_path / "config.toml"
        path.write_text("[server\nport = ", encoding="utf-8")
        assert ConfigManager(path).get_config() == AppConfig()

    def test_update_config(self, tmp_path, clean_env):
        manager = ConfigManager(tmp_path / "config.toml")
        manager.update_config(server={"port": 8080}, brokers={"UPSTOX": {"api_key": "k"}})

        assert manager.config.server.port == 8080
        assert manager.config.server.host == "0.0.0.0"
        assert manager.config.broker_credentials("UPSTOX").api_key == "k"

    def test_save_config_omits_secrets(self, tmp_path, clean_env):
        path = tmp_path / "nested" / "config.toml"
        manager = ConfigManager(path)
        manager.update_config(auth={"clerk_secret_key": "sk"}, brokers={"ZERODHA": {"api_key": "k"}})

        manager.save_config()

        with open(path, "rb") as f:
            saved = tomllib.load(f)
        assert "brokers" not in saved
        assert "clerk_secret_key" not in saved["auth"]
        assert "file" not in saved["logging"]
        assert saved["server"]["port"] == 8000

    def test_default_path_from_env(self, tmp_path, clean_env):
        path = tmp_path / "custom.toml"
        clean_env.setenv("FINTOLA_CONFIG", str(path))
        assert ConfigManager().config_path == path
