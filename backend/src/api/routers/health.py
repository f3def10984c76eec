"""Health check endpoints."""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from core.redis import get_redis_client
from db.session import get_async_session


logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str
    redis: str


async def check_redis_health() -> str:
    """Returns 'disabled', 'connected' or 'unavailable'."""
    if not get_settings().redis_enabled:
        return "disabled"
    redis_client = get_redis_client()
    if redis_client is None:
        return "unavailable"
    if await redis_client.ping():
        return "connected"
    return "unavailable"


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: AsyncSession = Depends(get_async_session),
) -> HealthResponse:
    """
    Check application, database and Redis health.

    Redis only matters when sessions live there; with the database session
    backend an unreachable Redis leaves the app healthy.
    """
    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        db_status = "unhealthy"

    redis_status = await check_redis_health()
    redis_required = get_settings().session_backend == "redis"

    healthy = db_status == "healthy" and not (redis_required and redis_status != "connected")
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        database=db_status,
        redis=redis_status,
    )
