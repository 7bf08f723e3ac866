from fastapi import APIRouter, Depends, Response, status

from gateway_hierarchy.api.dependencies import get_gateway
from gateway_hierarchy.api.schemas import HealthResponse, ReadinessResponse
from gateway_hierarchy.core.ports.gateway import DocumentGateway

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/healthz/live", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    """Liveness check."""
    return HealthResponse()


@router.get("/healthz/ready", response_model=ReadinessResponse)
async def readiness(
    response: Response,
    gateway: DocumentGateway = Depends(get_gateway),
) -> ReadinessResponse:
    """Readiness check: can the configuration document be reached?"""
    if await gateway.ping():
        return ReadinessResponse(status="ok", gateway="up")
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(status="degraded", gateway="down")
