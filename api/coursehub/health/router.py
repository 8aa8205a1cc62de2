"""Health check endpoints."""

from fastapi import APIRouter, Request, Response, status

from coursehub import __version__
from coursehub.config import get_settings


router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request, response: Response) -> dict[str, str | bool]:
    """Readiness probe: the database connection must be up."""
    connection = getattr(request.app.state, "cassandra", None)
    database_ready = bool(connection and connection.is_connected())
    if not database_ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {
        "status": "ready" if database_ready else "unavailable",
        "database": database_ready,
        "environment": get_settings().environment,
    }


@router.get("")
async def health() -> dict[str, str]:
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": __version__,
        "environment": settings.environment,
    }
