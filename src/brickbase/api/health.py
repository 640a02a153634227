"""Health check and liveness endpoints.

Learn: /health verifies the server is running and the database is
reachable. / is the plain banner the web client pings.
"""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from brickbase import __version__
from brickbase.db.engine import get_db

logger = structlog.get_logger()

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root():
    return "BrickBase Server is up and running!"


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check server health and database connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.error("health.database_unreachable", error=str(e))
        checks["database"] = "error"

    status = "healthy" if checks["database"] == "ok" else "degraded"
    return {"status": status, **checks}
