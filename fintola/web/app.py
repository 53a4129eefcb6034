"""
FastAPI 应用工厂和配置
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from fintola import __version__
from fintola.core.auth import (
    Authenticator,
    ClerkMetadataStore,
    ClerkSessionAuthenticator,
    HeaderAuthenticator,
    InMemoryMetadataStore,
    UserMetadataStore,
)
from fintola.core.brokers import BrokerConnector
from fintola.core.config import AppConfig, ConfigManager
from fintola.core.exceptions import ConfigurationError, ErrorCode, FintolaError
from fintola.core.health import get_health_checker
from fintola.core.logging import configure_logging, log_context
from fintola.core.market_data import PriceHistoryClient
from fintola.core.monitoring import get_metrics_collector
from fintola.core.notifications import SmsSender
from fintola.core.trading import get_auto_trader
from fintola.web.models import ErrorResponse
from fintola.web.routes import (
    auto_trader_router,
    broker_router,
    health_router,
    market_router,
    metrics_router,
    notifications_router,
    trading_bot_router,
)
from fintola.web.routes.trading_bot import BotState
from fintola.web.utils import get_request_id, route_label


class HTTPRequestLogger(BaseHTTPMiddleware):
    """请求日志与指标中间件"""

    def __init__(self, app, exclude_paths=None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or ["/health", "/metrics", "/docs", "/openapi.json"]

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if any(path.startswith(exclude) for exclude in self.exclude_paths):
            return await call_next(request)

        with log_context(trace_id=request.headers.get("X-Request-ID")):
            start_time = time.time()
            logger.info(
                "Request started",
                method=request.method,
                url=str(request.url),
                client=f"{request.client.host}:{request.client.port}" if request.client else None,
                user_agent=request.headers.get("user-agent", "unknown"),
            )

            try:
                response = await call_next(request)
            except Exception as e:
                duration = time.time() - start_time
                get_metrics_collector().observe_request(route_label(request), request.method, 500, duration)
                logger.error(
                    "Request failed",
                    method=request.method,
                    url=str(request.url),
                    duration_ms=round(duration * 1000, 2),
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                raise

            duration = time.time() - start_time
            get_metrics_collector().observe_request(
                route_label(request), request.method, response.status_code, duration
            )
            logger.success(
                "Request completed",
                method=request.method,
                url=str(request.url),
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
            return response


def _build_metadata_store(config: AppConfig) -> UserMetadataStore:
    """根据配置创建用户元数据存储"""
    if config.auth.clerk_secret_key:
        return ClerkMetadataStore(
            config.auth.clerk_secret_key, api_url=config.auth.clerk_api_url, timeout=config.auth.timeout
        )
    logger.warning("CLERK_SECRET_KEY not set, user metadata is kept in memory")
    return InMemoryMetadataStore()


def _build_authenticator(config: AppConfig) -> Authenticator:
    """根据认证模式创建认证器"""
    mode = config.auth.mode
    if mode == "header":
        return HeaderAuthenticator()
    if mode == "clerk":
        if not config.auth.clerk_secret_key:
            raise ConfigurationError("Clerk authentication requires CLERK_SECRET_KEY", setting="auth.clerk_secret_key")
        return ClerkSessionAuthenticator(
            config.auth.clerk_secret_key, api_url=config.auth.clerk_api_url, timeout=config.auth.timeout
        )
    raise ConfigurationError(f"Unknown auth mode: {mode}", setting="auth.mode")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理"""
    config: AppConfig = app.state.config
    configure_logging(
        level=config.logging.level,
        file_output=bool(config.logging.file),
        file_path=config.logging.file,
    )

    trader = get_auto_trader()
    if not trader.is_running:
        trader.update_config({"initial_capital": config.trading.initial_capital})

    checker = get_health_checker()
    checker.register_check(
        "auto_trader",
        lambda: {"status": "healthy", "details": {"running": get_auto_trader().is_running}},
    )
    logger.info("fintola started", version=__version__, auth_mode=config.auth.mode)

    yield

    # 关闭时清理
    trader = get_auto_trader()
    if trader.is_running:
        trader.stop()
    await app.state.authenticator.close()
    await app.state.metadata_store.close()


def create_app(
    config: AppConfig | None = None,
    *,
    metadata_store: UserMetadataStore | None = None,
    authenticator: Authenticator | None = None,
    price_client: PriceHistoryClient | None = None,
    broker_connector: BrokerConnector | None = None,
    sms_sender: SmsSender | None = None,
) -> FastAPI:
    """创建 FastAPI 应用实例

    未显式传入的组件按配置创建，测试可以注入替身。
    """
    config = config or ConfigManager().get_config()

    app = FastAPI(
        title="fintola",
        description="交易看板后端：技术指标、模拟交易机器人、券商授权与行情代理",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # 存储到应用状态
    app.state.config = config
    app.state.start_time = time.time()
    app.state.metadata_store = metadata_store or _build_metadata_store(config)
    app.state.authenticator = authenticator or _build_authenticator(config)
    app.state.price_client = price_client or PriceHistoryClient()
    app.state.broker_connector = broker_connector or BrokerConnector(config, app.state.metadata_store)
    app.state.sms_sender = sms_sender or SmsSender(config.trading.simulated_latency_ms)
    app.state.bot_state = BotState()

    _setup_middleware(app, config)
    _setup_routes(app)
    _setup_exception_handlers(app)

    return app


def _setup_middleware(app: FastAPI, config: AppConfig) -> None:
    """配置中间件"""
    app.add_middleware(HTTPRequestLogger)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Gzip 压缩
    app.add_middleware(GZipMiddleware, minimum_size=1000)


def _setup_routes(app: FastAPI) -> None:
    """注册路由"""
    app.include_router(trading_bot_router, prefix="/api", tags=["trading-bot"])
    app.include_router(auto_trader_router, prefix="/api", tags=["auto-trader"])
    app.include_router(broker_router, prefix="/api", tags=["broker"])
    app.include_router(notifications_router, prefix="/api", tags=["notifications"])
    app.include_router(market_router, prefix="/api", tags=["market"])
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])


def _error_response(request: Request, status_code: int, error: ErrorResponse) -> JSONResponse:
    error.request_id = get_request_id(request)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(error, by_alias=True))


def _setup_exception_handlers(app: FastAPI) -> None:
    """配置异常处理器"""

    @app.exception_handler(FintolaError)
    async def fintola_exception_handler(request: Request, exc: FintolaError) -> JSONResponse:
        """处理 fintola 自定义异常"""
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code}: {exc.message}", error_code=exc.error_code)
        return _error_response(
            request,
            exc.status_code,
            ErrorResponse(error=exc.message, code=exc.error_code, details=exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """处理请求参数校验失败"""
        return _error_response(
            request,
            400,
            ErrorResponse(
                error="Invalid request",
                code=ErrorCode.VALIDATION_ERROR.value,
                details={"errors": jsonable_encoder(exc.errors())},
            ),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """处理 HTTP 异常"""
        return _error_response(
            request,
            exc.status_code,
            ErrorResponse(
                error=str(exc.detail),
                code=ErrorCode.GENERAL_ERROR.value,
                details={"status_code": exc.status_code},
            ),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """处理未捕获的异常"""
        logger.exception(f"Unhandled error: {exc}")
        return _error_response(
            request,
            500,
            ErrorResponse(
                error="Internal server error",
                code=ErrorCode.INTERNAL_ERROR.value,
                details={"type": type(exc).__name__},
            ),
        )
