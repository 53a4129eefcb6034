"""Web相关的工具函数"""

import re

from fastapi import Request

from fintola.core.logging import current_trace_id

MOBILE_USER_AGENT = re.compile(r"iPhone|iPad|iPod|Android", re.IGNORECASE)


def get_request_id(request: Request) -> str:
    """从请求头中获取 X-Request-ID，缺失时使用当前 trace id"""
    return request.headers.get("X-Request-ID") or current_trace_id()


def is_mobile_user_agent(user_agent: str | None) -> bool:
    """判断是否为移动端浏览器"""
    return bool(user_agent and MOBILE_USER_AGENT.search(user_agent))


def route_label(request: Request) -> str:
    """指标使用的路由模板，未匹配时返回原始路径"""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path
