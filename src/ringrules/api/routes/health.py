from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ringrules import __version__
from ringrules.api.dependencies import get_runtime

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    checks: dict[str, str] | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check(runtime=Depends(get_runtime)) -> HealthResponse:
    """Liveness probe - is the service running?"""
    checks = {
        "scheduler": "running" if runtime.scheduler.is_running else "stopped",
        "pending_events": str(runtime.engine.pending),
    }
    return HealthResponse(status="healthy", version=__version__, checks=checks)
