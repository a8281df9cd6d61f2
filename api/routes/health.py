"""Health check endpoints."""

from datetime import datetime
from typing import Dict

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel


router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: str
    version: str
    services: Dict[str, str]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint."""
    connection = request.app.state.connection
    if connection is None:
        zeebe = "not configured"
    else:
        zeebe = "up" if connection.state.connected else "down"

    service = request.app.state.polling_service
    worker = "running" if service is not None and service.is_running else "stopped"

    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow().isoformat(),
        version="1.0.0",
        services={
            "api": "up",
            "zeebe": zeebe,
            "worker": worker,
            "storage": "up",
        }
    )


@router.get("/ready")
async def readiness_check() -> Dict[str, str]:
    """Readiness probe for Kubernetes."""
    return {"status": "ready"}


@router.get("/live")
async def liveness_check(response: Response) -> Dict[str, str]:
    """Liveness probe for Kubernetes."""
    return {"status": "alive"}
