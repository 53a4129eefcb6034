"""
Web 服务启动脚本
"""

import uvicorn

from fintola.core.config import ConfigManager


def fintola_main() -> None:
    """启动 FastAPI Web 服务"""
    config = ConfigManager().get_config()

    uvicorn.run(
        "fintola.web.app:create_app",
        factory=True,
        host=config.server.host,
        port=config.server.port,
        reload=config.server.reload,
        log_level="info",
    )


if __name__ == "__main__":
    fintola_main()
