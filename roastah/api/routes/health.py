"""Health check endpoints.

Provides health status for container probes and monitoring.
"""

from fastapi import APIRouter

from roastah import __version__
from roastah.config import settings
from roastah.core.preferences import get_preference_store
from roastah.infra.logging import get_logger
from roastah.schemas.common import HealthResponse

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Basic health check.

    Returns 200 if service is running.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.environment,
        checks={},
    )


@router.get("/health/ready", response_model=HealthResponse)
async def health_ready() -> HealthResponse:
    """Readiness check.

    Verifies UI preferences were loaded from the database.
    """
    checks: dict[str, bool] = {
        "preferences": get_preference_store().loaded,
    }

    all_healthy = all(checks.values())
    if not all_healthy:
        logger.warning("Readiness check degraded", checks=checks)

    return HealthResponse(
        status="healthy" if all_healthy else "degraded",
        version=__version__,
        environment=settings.environment,
        checks=checks,
    )


@router.get("/health/live", response_model=HealthResponse)
async def health_live() -> HealthResponse:
    """Liveness check."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.environment,
        checks={"alive": True},
    )
