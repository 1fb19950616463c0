"""Liveness and dependency checks for the booking API"""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.config.redis import RedisKeys, get_redis
from app.config.settings import get_settings

health_router = APIRouter()


@health_router.get("/")
async def health_check():
    """Liveness probe, touches nothing"""
    return {"status": "healthy", "service": "booking-api"}


@health_router.get("/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Database and Redis reachability plus the calendar sync state.

    Redis is only needed by the calendar worker, so a Redis outage marks the
    API as degraded rather than unhealthy.
    """
    settings = get_settings()
    checks = {
        "database": "unknown",
        "redis": "unknown",
        "calendar": {
            "enabled": settings.GOOGLE_CALENDAR_ENABLED,
            "last_sync": None,
        },
    }

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        checks["database"] = f"unhealthy: {e}"

    try:
        redis_client = await get_redis()
        await redis_client.ping()
        last_sync = await redis_client.get(RedisKeys.CALENDAR_LAST_SYNC)
        checks["calendar"]["last_sync"] = last_sync.decode() if last_sync else None
        checks["redis"] = "healthy"
        await redis_client.aclose()
    except Exception as e:
        checks["redis"] = f"unhealthy: {e}"

    if checks["database"] != "healthy":
        checks["overall"] = "unhealthy"
    elif checks["redis"] != "healthy":
        checks["overall"] = "degraded"
    else:
        checks["overall"] = "healthy"

    return checks
