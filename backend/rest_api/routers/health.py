"""
Health check router.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from shared.config.settings import settings
from shared.infrastructure.db import engine
from shared.utils.health import HealthStatus, check_database


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check():
    """Liveness plus a database round-trip. 503 when the database is unreachable."""
    database = check_database(engine)
    body = {
        "status": database.status.value,
        "service": "rest-api",
        "environment": settings.environment,
        "dependencies": {"database": database.to_dict()},
    }
    if database.status != HealthStatus.HEALTHY:
        return JSONResponse(content=body, status_code=503)
    return body
