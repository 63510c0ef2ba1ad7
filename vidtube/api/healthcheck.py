"""Liveness and readiness probes."""

from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db import get_db
from vidtube.models.schemas import ApiResponse, ok
from vidtube.utils.cache import cache
from vidtube.utils.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)

# Store app start time for uptime tracking
_app_start_time = datetime.now(UTC)


@router.get("/liveness", response_model=ApiResponse[dict])
async def liveness() -> ApiResponse:
    """The process is up. Never touches dependencies."""
    now = datetime.now(UTC)
    return ok(
        {
            "status": "alive",
            "timestamp": now.isoformat(),
            "uptimeSeconds": (now - _app_start_time).total_seconds(),
        },
        "Service is alive",
    )


@router.get("/readiness")
async def readiness(db: Annotated[AsyncSession, Depends(get_db)]) -> JSONResponse:
    """Ready to serve when the database answers; 503 otherwise.

    Redis is reported when configured but does not gate readiness.
    """
    checks: dict[str, Any] = {}
    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "connected"
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Readiness check: database unreachable: {e}")
        checks["database"] = "disconnected"

    if cache.enabled:
        try:
            await cache.ping()
            checks["redis"] = "connected"
        except (RedisError, OSError) as e:
            logger.warning(f"Readiness check: redis unreachable: {e}")
            checks["redis"] = "disconnected"

    ready = checks["database"] == "connected"
    status_code = status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE
    body = {
        "statusCode": status_code,
        "message": "Service is ready" if ready else "Service is not ready",
        "data": {
            "status": "ready" if ready else "not ready",
            "timestamp": datetime.now(UTC).isoformat(),
            "checks": checks,
        },
        "success": ready,
    }
    return JSONResponse(content=body, status_code=status_code)
