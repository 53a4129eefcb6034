"""
券商授权路由

broker-connect 生成授权地址，broker-callback 接收券商回调、换取令牌并跳转回前端。
"""

from urllib.parse import quote, urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from loguru import logger

from fintola.core.brokers import BrokerConnector
from fintola.core.config import AppConfig
from fintola.core.exceptions import (
    BrokerConfigurationError,
    BrokerError,
    MissingAccessTokenError,
    UnsupportedBrokerError,
)
from fintola.web.dependencies import get_broker_connector, get_config, get_current_user
from fintola.web.models import BrokerConnectRequest
from fintola.web.utils import is_mobile_user_agent

router = APIRouter()

APP_DEEP_LINK = "tradex://broker-connected"

_MOBILE_REDIRECT_PAGE = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>Broker Connected</title>
    <script>
      window.location.href = "{deep_link}";
      setTimeout(function() {{
        window.location.href = "{fallback_url}";
      }}, 1000);
    </script>
  </head>
  <body>
    <p>Redirecting back to the app...</p>
  </body>
</html>
"""


def _error_redirect(config: AppConfig, message: str) -> RedirectResponse:
    query = urlencode({"message": message}, quote_via=quote)
    return RedirectResponse(f"{config.server.app_url.rstrip('/')}/trading/error?{query}")


@router.post("/broker-connect")
async def broker_connect(
    body: BrokerConnectRequest,
    user_id: str = Depends(get_current_user),
    connector: BrokerConnector = Depends(get_broker_connector),
) -> dict:
    """开始券商授权流程，返回网页与移动端授权地址"""
    try:
        connection = await connector.start_connection(user_id, body.broker_id)
    except (UnsupportedBrokerError, BrokerConfigurationError):
        raise
    except Exception as e:
        logger.error(f"Error initiating broker connection: {e}", user_id=user_id)
        raise BrokerError("Failed to connect to broker", body.broker_id) from e
    return connection.to_json_dict()


@router.get("/broker-callback")
async def broker_callback(
    request: Request,
    code: str | None = None,
    broker_id: str | None = Query(None, alias="brokerId"),
    user_id: str | None = Query(None, alias="userId"),
    session_id: str | None = Query(None, alias="sessionId"),
    config: AppConfig = Depends(get_config),
    connector: BrokerConnector = Depends(get_broker_connector),
) -> Response:
    """处理券商回调：换取令牌、记录连接并按设备类型跳转"""
    if not code or not broker_id or not user_id or not session_id:
        return _error_redirect(config, "Missing required parameters")

    try:
        await connector.handle_callback(code, broker_id, user_id, session_id)
    except MissingAccessTokenError:
        logger.warning("Broker returned no access token", broker=broker_id, user_id=user_id)
        return _error_redirect(config, "Failed to get access token")
    except Exception as e:
        logger.error(f"Error processing broker callback: {e}", broker=broker_id, user_id=user_id)
        return _error_redirect(config, "Failed to connect broker")

    app_url = config.server.app_url.rstrip("/")
    if is_mobile_user_agent(request.headers.get("user-agent")):
        deep_link = f"{APP_DEEP_LINK}?status=success&broker={quote(broker_id)}"
        return HTMLResponse(
            _MOBILE_REDIRECT_PAGE.format(deep_link=deep_link, fallback_url=f"{app_url}/trading/automated")
        )
    return RedirectResponse(f"{app_url}/trading/automated")
