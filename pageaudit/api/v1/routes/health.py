"""Health check endpoints for load balancer and monitoring."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    checks: dict[str, str]


@router.get("", response_model=HealthResponse, include_in_schema=False)
async def health_check(request: Request) -> HealthResponse:
    from pageaudit.core.config import get_settings
    settings = get_settings()

    checks: dict[str, str] = {}

    service = getattr(request.app.state, "analysis_service", None)
    checks["analysis_service"] = "healthy" if service is not None else "unhealthy: not initialized"

    if service is not None and service.aggregator.narrative_generator is not None:
        checks["narrative"] = "configured"
    else:
        checks["narrative"] = "disabled"

    if service is not None and service.aggregator.grammar_checker is not None:
        checks["grammar"] = "configured"
    else:
        checks["grammar"] = "disabled"

    overall = "healthy" if all("unhealthy" not in v for v in checks.values()) else "degraded"

    return HealthResponse(
        status=overall,
        version=settings.APP_VERSION,
        checks=checks,
    )


@router.get("/ready", include_in_schema=False)
async def readiness(request: Request) -> dict:
    """Kubernetes readiness probe."""
    return {"ready": getattr(request.app.state, "analysis_service", None) is not None}


@router.get("/live", include_in_schema=False)
async def liveness() -> dict:
    """Kubernetes liveness probe."""
    return {"alive": True}
