"""Health checking utilities."""

import inspect
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from fintola import __version__


class HealthStatus:
    """Aggregated result of all registered checks."""

    def __init__(
        self,
        status: str,
        timestamp: datetime | None = None,
        checks: dict[str, Any] | None = None,
        uptime_seconds: float = 0.0,
    ):
        self.status = status
        self.timestamp = timestamp or datetime.now(UTC)
        self.checks = checks or {}
        self.uptime_seconds = uptime_seconds
        self.version = __version__


class HealthChecker:
    """Runs named sync or async checks and folds them into one status."""

    def __init__(self, name: str = "default"):
        """Initialize health checker.

        Args:
            name: Name of the health checker
        """
        self.name = name
        self.start_time = time.time()
        self.checks: dict[str, Callable] = {}

    def register_check(self, name: str, check_func: Callable) -> None:
        """Register a health check function.

        Args:
            name: Name of the check
            check_func: Callable returning ``{"status": ..., "details": ...}``
        """
        self.checks[name] = check_func

    async def check_health(self) -> HealthStatus:
        """Check system health.

        Returns:
            HealthStatus containing health status and details
        """
        uptime = time.time() - self.start_time
        checks = {}

        for check_name, check_func in self.checks.items():
            try:
                if inspect.iscoroutinefunction(check_func):
                    result = await check_func()
                else:
                    result = check_func()
                checks[check_name] = result
            except Exception as e:
                checks[check_name] = {"status": "unhealthy", "message": str(e)}

        statuses = [check.get("status", "unknown") for check in checks.values()]
        if any(status == "unhealthy" for status in statuses):
            status = "unhealthy"
        elif any(status == "degraded" for status in statuses):
            status = "degraded"
        else:
            status = "healthy"

        return HealthStatus(
            status=status,
            timestamp=datetime.now(UTC),
            checks=checks,
            uptime_seconds=uptime,
        )


_health_checker: HealthChecker | None = None


def get_health_checker(name: str = "default") -> HealthChecker:
    """Return the process-wide health checker."""
    global _health_checker
    if _health_checker is None:
        _health_checker = HealthChecker(name)
    return _health_checker
