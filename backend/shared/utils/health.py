"""
Health check utilities.

Usage:
    from shared.utils.health import check_database

    result = check_database(engine)
    # HealthCheckResult(status=HEALTHY, component="database", latency_ms=1.3)
"""

from __future__ import annotations

import concurrent.futures
import functools
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from sqlalchemy import Engine, text

from shared.config.logging import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    """Health check status values."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheckResult:
    """Result of one component check."""
    status: HealthStatus
    component: str
    latency_ms: float | None = None
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result = {
            "status": self.status.value,
            "component": self.component,
        }
        if self.latency_ms is not None:
            result["latency_ms"] = round(self.latency_ms, 2)
        if self.error:
            result["error"] = self.error
        if self.details:
            result["details"] = self.details
        return result


def health_check_with_timeout(timeout: float = 5.0, component: str | None = None):
    """
    Decorator turning a blocking check into a HealthCheckResult.

    The check runs on a worker thread so a hung connection cannot stall the
    caller past ``timeout`` seconds. Any exception marks the component unhealthy.
    """

    def decorator(func: Callable[..., dict[str, Any] | None]) -> Callable[..., HealthCheckResult]:
        comp_name = component or func.__name__.replace("check_", "")

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> HealthCheckResult:
            start_time = time.perf_counter()
            executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
            try:
                result = executor.submit(func, *args, **kwargs).result(timeout=timeout)
                details = result if isinstance(result, dict) else {}
                return HealthCheckResult(
                    status=HealthStatus.HEALTHY,
                    component=comp_name,
                    latency_ms=(time.perf_counter() - start_time) * 1000,
                    details=details,
                )
            except concurrent.futures.TimeoutError:
                logger.warning("Health check timeout", component=comp_name, timeout=timeout)
                return HealthCheckResult(
                    status=HealthStatus.UNHEALTHY,
                    component=comp_name,
                    latency_ms=(time.perf_counter() - start_time) * 1000,
                    error=f"timeout after {timeout}s",
                )
            except Exception as e:
                logger.warning("Health check failed", component=comp_name, error=str(e))
                return HealthCheckResult(
                    status=HealthStatus.UNHEALTHY,
                    component=comp_name,
                    latency_ms=(time.perf_counter() - start_time) * 1000,
                    error=str(e),
                )
            finally:
                executor.shutdown(wait=False)

        return wrapper

    return decorator


@health_check_with_timeout(timeout=3.0, component="database")
def check_database(engine: Engine) -> dict[str, Any]:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"dialect": engine.dialect.name}
