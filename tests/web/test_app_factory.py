"""
应用工厂与错误处理测试
"""

import pytest
from fastapi.testclient import TestClient

from fintola import __version__
from fintola.core.auth import ClerkMetadataStore, ClerkSessionAuthenticator, InMemoryMetadataStore
from fintola.core.auth.session import HeaderAuthenticator
from fintola.core.config import AppConfig
from fintola.core.exceptions import ConfigurationError
from fintola.core.trading import get_auto_trader
from fintola.web.app import create_app


def test_basic_app(app):
    """测试基本应用创建"""
    assert app.title == "fintola"
    assert app.version == __version__
    assert isinstance(app.state.authenticator, HeaderAuthenticator)


def test_default_components():
    """未配置 Clerk 时使用内存存储和请求头认证"""
    app = create_app(AppConfig())
    assert isinstance(app.state.metadata_store, InMemoryMetadataStore)
    assert isinstance(app.state.authenticator, HeaderAuthenticator)


def test_clerk_components():
    """配置 Clerk 密钥后使用 Clerk 存储和会话认证"""
    config = AppConfig.from_dict({"auth": {"mode": "clerk", "clerk_secret_key": "sk_test"}})
    app = create_app(config)
    assert isinstance(app.state.metadata_store, ClerkMetadataStore)
    assert isinstance(app.state.authenticator, ClerkSessionAuthenticator)


@pytest.mark.parametrize(
    "auth",
    [{"mode": "clerk"}, {"mode": "kerberos"}],
)
def test_invalid_auth_configuration(auth):
    """认证配置错误时拒绝启动"""
    with pytest.raises(ConfigurationError):
        create_app(AppConfig.from_dict({"auth": auth}))


def test_error_body_shape(client):
    """错误响应包含统一字段并回传请求 ID"""
    response = client.get("/api/auto-trader", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 401
    body = response.json()
    assert set(body) == {"success", "error", "code", "details", "timestamp", "requestId"}
    assert body["requestId"] == "req-123"
    assert body["success"] is False


def test_not_found(client):
    """未知路由返回 404"""
    response = client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json()["code"] == "GENERAL_ERROR"


def test_unhandled_error(app, price_client):
    """未捕获异常返回 500 且不泄露内部信息"""
    price_client.error = RuntimeError("secret internals")

    response = TestClient(app, raise_server_exceptions=False).get("/api/finance")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Internal server error"
    assert body["code"] == "INTERNAL_ERROR"
    assert "secret internals" not in response.text


def test_cors_headers(client):
    """跨域请求返回 CORS 头"""
    response = client.get("/api/trading-history", headers={"Origin": "https://app.example.com"})
    assert response.headers["access-control-allow-origin"] in ("*", "https://app.example.com")


def test_startup_applies_configured_capital():
    """启动时把配置中的初始资金写入 AutoTrader"""
    config = AppConfig.from_dict({"trading": {"initial_capital": 250000}})

    with TestClient(create_app(config)):
        assert get_auto_trader().config.initial_capital == 250000
