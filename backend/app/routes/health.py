"""
Employee Dashboard Backend — Service Identity and Health Routes
================================================================

What:  GET / (service identity) and GET /health (database probe).
Why:   Load balancers and the UI need a route that answers without a token.
How:   / is static; /health runs SELECT 1 against the app's engine.

Neither route sits under /employees, so the bearer gate never applies.
"""

import logging
import time

from fastapi import APIRouter, Request
from sqlalchemy import text

from app import __version__
from app.schemas.employee import HealthResponse, ServiceInfoResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/",
    response_model=ServiceInfoResponse,
    summary="Service identity",
)
async def service_info() -> ServiceInfoResponse:
    return ServiceInfoResponse(
        message="Employee Dashboard API is running",
        version=__version__,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Reports whether the database answers a trivial query. Always HTTP 200; "
        "probes should read `status`."
    ),
)
async def health_check(request: Request) -> HealthResponse:
    """
    Check database connectivity.

    Returns:
        HealthResponse with status "healthy" when SELECT 1 succeeds,
        "unhealthy" otherwise.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        async with request.app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
