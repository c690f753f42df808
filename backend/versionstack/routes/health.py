"""Health, liveness and readiness endpoints."""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from versionstack import __version__
from versionstack.db import get_db
from versionstack.exceptions import DatabaseError
from versionstack.utils.timezone import get_now

logger = logging.getLogger(__name__)

router = APIRouter()

_STARTED_AT = time.monotonic()


@router.get("")
async def health(db: AsyncSession = Depends(get_db)):
    """Overall health with a database round-trip. 503 when the database is down."""
    body = {
        "status": "healthy",
        "timestamp": get_now().isoformat(),
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
        "version": __version__,
        "checks": {"database": {"status": "up"}},
    }
    try:
        started = time.perf_counter()
        await db.execute(text("SELECT 1"))
        body["checks"]["database"]["latency_ms"] = round((time.perf_counter() - started) * 1000, 2)
    except Exception as e:
        logger.error(f"Health check database query failed: {e}")
        body["status"] = "unhealthy"
        body["checks"]["database"] = {"status": "down", "error": str(e)}

    return JSONResponse(status_code=200 if body["status"] == "healthy" else 503, content=body)


@router.get("/live")
async def live():
    return {"status": "alive", "timestamp": get_now().isoformat()}


@router.get("/ready")
async def ready(db: AsyncSession = Depends(get_db)):
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        raise DatabaseError("Database not ready") from e
    return {"status": "ready", "timestamp": get_now().isoformat()}
