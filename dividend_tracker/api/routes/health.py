"""
Health check endpoint.
"""

import time

import structlog
from fastapi import APIRouter, Depends

from dividend_tracker import __version__
from dividend_tracker.api.dependencies import get_context
from dividend_tracker.api.models import ComponentHealth, HealthResponse
from dividend_tracker.auth.verifier import AsymmetricKeySet
from dividend_tracker.context import ServiceContext
from dividend_tracker.storage.database import Database

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _check_database(db: Database) -> ComponentHealth:
    """Check database connectivity and measure latency."""
    start = time.perf_counter()
    healthy = await db.health_check()
    latency_ms = (time.perf_counter() - start) * 1000
    return ComponentHealth(
        status="healthy" if healthy else "unhealthy",
        latency_ms=round(latency_ms, 2),
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    context: ServiceContext = Depends(get_context),
) -> HealthResponse:
    """
    Status logic:
    - unhealthy: database is down
    - degraded: token verification is not configured
    - healthy: all components operational
    """
    components = {"database": await _check_database(context.database)}

    auth_mode = None
    if context.verifier is not None:
        auth_mode = (
            "asymmetric"
            if isinstance(context.verifier.key, AsymmetricKeySet)
            else "symmetric"
        )
    components["auth"] = ComponentHealth(
        status="healthy" if auth_mode else "unhealthy",
        details={"mode": auth_mode} if auth_mode else {"error": "not configured"},
    )

    if components["database"].status == "unhealthy":
        status = "unhealthy"
    elif auth_mode is None:
        status = "degraded"
    else:
        status = "healthy"

    return HealthResponse(
        status=status,
        components=components,
        auth_mode=auth_mode,
        version=__version__,
    )
