from fastapi import APIRouter, Depends, HTTPException
from structlog import get_logger
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.sql import text

from app.config import settings
from app.services.repository import PropertyRepository, get_repository

logger = get_logger()
router = APIRouter(prefix="/api/v1", tags=["health"])

@router.get("/health")
async def health():
    return {"status": "ok"}

@router.get("/health/ready")
async def readiness():
    details = {"status": "ok", "checks": {}}

    try:
        redis = Redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
        pong = await redis.ping()
        details["checks"]["redis"] = "ok" if pong else "fail"
    except Exception as e:
        logger.warning("health redis fail", error=str(e))
        details["checks"]["redis"] = f"fail: {str(e)}"
        details["status"] = "degraded"

    engine = create_async_engine(settings.DATABASE_URL)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        details["checks"]["database"] = "ok"
    except Exception as e:
        logger.warning("health db fail", error=str(e))
        details["checks"]["database"] = f"fail: {str(e)}"
        details["status"] = "degraded"
    finally:
        await engine.dispose()

    return details

@router.post("/cache/clear")
async def clear_cache(repository: PropertyRepository = Depends(get_repository)):
    """
    Drop the cached property collection so the next listing request reads the database.
    """
    try:
        deleted = await repository.invalidate_cache()
    except Exception as e:
        logger.error("Failed to clear cache", error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to clear cache: {str(e)}")
    logger.info("Cache cleared", deleted_keys=deleted)
    return {"status": "ok", "cleared_keys": deleted}
