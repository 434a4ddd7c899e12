"""Session endpoints (sidebar "Sair")."""

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from facillit_admin.backend.client import BackendClient, BackendError
from facillit_admin.config.app_config import AdminConfig
from facillit_admin.web.deps import get_access_token, get_backend, get_config

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/sign-out")
async def sign_out(
    access_token: str | None = Depends(get_access_token),
    backend: BackendClient = Depends(get_backend),
    config: AdminConfig = Depends(get_config),
) -> RedirectResponse:
    """End the caller's session and send them back to the entry route."""
    if access_token:
        try:
            backend.sign_out(access_token)
        except BackendError as e:
            logger.warning("sign_out_failed", error=e.message)
        else:
            logger.info("signed_out")

    return RedirectResponse(config.gate.entry_route, status_code=status.HTTP_303_SEE_OTHER)
