"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if the persistence backend is unreachable (readiness)
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from airsoft_shop.api.dependencies import get_gateways
from airsoft_shop.infrastructure.gateway_factory import Gateways

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "airsoft-shop-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(gateways: Gateways = Depends(get_gateways)):
    """Readiness probe — includes storage backend reachability."""
    if not await gateways.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "storage_unavailable",
                "backend": gateways.backend,
            },
        )
    return {"status": "ready", "checks": {gateways.backend: "healthy"}}
