"""Dashboard home endpoint."""

from fastapi import APIRouter, Depends

from facillit_admin.backend.client import BackendClient
from facillit_admin.core.dashboard import load_dashboard_stats
from facillit_admin.web.deps import AdminContext, get_backend, require_admin
from facillit_admin.web.schemas import DashboardResponse

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    admin: AdminContext = Depends(require_admin),
    backend: BackendClient = Depends(get_backend),
) -> DashboardResponse:
    """Headline counts."""
    stats = load_dashboard_stats(backend, admin.access_token)
    return DashboardResponse(
        total_students=stats.total_students,
        total_schools=stats.total_schools,
        error=stats.error,
    )
