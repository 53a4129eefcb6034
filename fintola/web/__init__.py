"""fintola Web 服务"""

from fintola.web.app import create_app

__all__ = ["create_app"]
