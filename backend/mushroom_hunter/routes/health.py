"""
Mushroom Hunter Backend — Health Check Route
==============================================

What:  Health check endpoint for Docker health checks and load balancers.
How:   Runs `SELECT 1` against the database. The service is only healthy
       when the database answers; otherwise it reports 503 so traffic is
       routed elsewhere.
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text

from mushroom_hunter import __version__
from mushroom_hunter.database import engine
from mushroom_hunter.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
