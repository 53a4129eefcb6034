"""Health monitoring and status checking."""

from fintola.core.health.checker import HealthChecker, HealthStatus, get_health_checker

__all__ = ["HealthChecker", "HealthStatus", "get_health_checker"]
