"""Health check endpoints.

Completion notifications go through the SAQ queue, so readiness covers both
the database and the queue's Redis connection.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from trustlink.api.deps import SessionDep
from trustlink.tasks.queue import queue

logger = logging.getLogger(__name__)

router = APIRouter()


async def _database_status(session: AsyncSession) -> str:
    try:
        await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database health check failed: {e!r}")
        return "disconnected"
    return "connected"


async def _queue_status() -> str:
    redis = getattr(queue, "redis", None)
    if redis is None:
        return "not_initialized"
    try:
        await redis.ping()
    except Exception as e:
        logger.error(f"Notification queue health check failed: {e!r}")
        return "disconnected"
    return "connected"


@router.get("")
async def health_check():
    """Liveness only."""
    return {"status": "ok"}


@router.get("/db")
async def health_check_db(session: SessionDep):
    database = await _database_status(session)
    if database != "connected":
        return JSONResponse(status_code=503, content={"status": "error", "database": database})
    return {"status": "ok", "database": database}


@router.get("/queue")
async def health_check_queue():
    """Redis behind the notification queue."""
    notifications = await _queue_status()
    if notifications != "connected":
        return JSONResponse(
            status_code=503, content={"status": "error", "notifications": notifications}
        )
    return {"status": "ok", "notifications": notifications}


@router.get("/ready")
async def readiness_check(session: SessionDep):
    """Readiness for load balancers.

    The database is critical and fails the check with 503. A queue outage only
    degrades: sessions still complete, notifications are skipped.
    """
    database = await _database_status(session)
    notifications = await _queue_status()

    response = {
        "status": "ok" if notifications == "connected" else "degraded",
        "database": database,
        "notifications": notifications,
    }
    if database != "connected":
        response["status"] = "error"
        return JSONResponse(status_code=503, content=response)
    return response
