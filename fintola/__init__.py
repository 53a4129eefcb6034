"""fintola - 交易看板后端服务

提供技术指标计算、模拟交易机器人、券商授权接入以及行情代理等功能。
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
