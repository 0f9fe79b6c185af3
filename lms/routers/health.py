from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from datetime import datetime, timezone
from lms.deps import get_redis, get_db
from redis.asyncio import Redis
from pymongo.database import Database
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"], prefix="/api/v1")

@router.get("/health", summary="Health Check", description="Check the health status of the application and its dependencies")
async def health_check(r: Redis = Depends(get_redis), db: Database = Depends(get_db)):
    redis_status = "disconnected"
    mongo_status = "disconnected"
    redis_error = None
    mongo_error = None

    try:
        await r.ping()
        redis_status = "connected"
    except Exception as e:
        logger.error(f"Redis health check error: {str(e)}")
        redis_error = "Health check failed"

    try:
        await run_in_threadpool(db.command, "ping")
        mongo_status = "connected"
    except Exception as e:
        logger.error(f"MongoDB health check error: {str(e)}")
        mongo_error = "Health check failed"

    # MongoDB holds every document; without it nothing works
    if mongo_status == "connected" and redis_status == "connected":
        overall_status = "healthy"
    elif mongo_status == "connected":
        overall_status = "degraded"
    else:
        overall_status = "unhealthy"

    response = {
        "status": overall_status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "redis": {"status": redis_status, "error": redis_error},
            "mongodb": {"status": mongo_status, "error": mongo_error},
        }
    }

    if overall_status == "unhealthy":
        raise HTTPException(status_code=503, detail=response)

    return response
