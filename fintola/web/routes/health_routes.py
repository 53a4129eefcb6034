"""
健康检查与指标路由
"""

from fastapi import APIRouter, Response
from loguru import logger
from prometheus_client import CONTENT_TYPE_LATEST

from fintola.core.health import get_health_checker
from fintola.core.monitoring import get_metrics_collector
from fintola.web.models import APIResponse

router = APIRouter()
metrics_router = APIRouter()


@router.get("/health", response_model=APIResponse)
async def health_check() -> APIResponse:
    """
    基础健康检查

    检查应用是否正常运行
    """
    checker = get_health_checker()
    health = await checker.check_health()

    logger.info(
        "Health check completed",
        endpoint="/health",
        status=health.status,
        uptime_seconds=health.uptime_seconds,
    )

    return APIResponse(
        success=True,
        data={
            "status": health.status,
            "timestamp": health.timestamp.isoformat(),
            "uptimeSeconds": health.uptime_seconds,
            "version": health.version,
            "checks": health.checks,
        },
        message="系统健康检查完成",
    )


@router.get("/health/live", response_model=APIResponse)
async def liveness_check() -> APIResponse:
    """存活检查"""
    return APIResponse(success=True, data={"alive": True}, message="应用存活")


@metrics_router.get("/metrics", include_in_schema=False)
def metrics_endpoint() -> Response:
    """Prometheus 文本格式的指标"""
    return Response(content=get_metrics_collector().render(), media_type=CONTENT_TYPE_LATEST)
