"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter

from facillit_admin import __version__
from facillit_admin.web.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check API health status."""
    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
