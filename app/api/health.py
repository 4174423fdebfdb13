"""Health check endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app import __version__
from app.dependencies import get_registry
from src.state_store import StoreRegistry

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


class HealthDetailResponse(HealthResponse):
    """Detailed health check response with registry status."""

    stores: int


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="ok", version=__version__)


@router.get("/health/ready", response_model=HealthDetailResponse)
async def readiness_check(
    registry: StoreRegistry = Depends(get_registry)
) -> HealthDetailResponse:
    """Readiness check including the number of live stores."""
    return HealthDetailResponse(
        status="ok",
        version=__version__,
        stores=registry.size,
    )
