"""Health check endpoints."""
import logging

from fastapi import APIRouter
from pydantic import BaseModel

from core.redis import get_redis_client


logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    redis: str


async def check_redis_health() -> str:
    """Check Redis connectivity. Returns 'connected', 'unavailable' or 'disabled'."""
    redis_client = get_redis_client()
    if redis_client is None:
        return "disabled"
    if not redis_client.is_connected:
        return "unavailable"
    try:
        if await redis_client.ping():
            return "connected"
        return "unavailable"
    except Exception:
        logger.exception("Redis health check failed")
        return "unavailable"


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Check application health.

    Note: App returns 'healthy' even if Redis is unavailable (degraded mode).
    Without Redis every cache read misses and requests go to AggieTime directly.
    """
    return HealthResponse(status="healthy", redis=await check_redis_health())
