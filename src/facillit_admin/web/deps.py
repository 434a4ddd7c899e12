"""FastAPI dependencies: backend handle, config, admin gate, confirmation."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from facillit_admin.backend.client import BackendClient
from facillit_admin.config.app_config import AdminConfig
from facillit_admin.core.access_gate import AccessDeniedError, AccessGate

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AdminContext:
    """The administrator behind the current request."""

    user_id: str
    access_token: str


async def get_backend(request: Request) -> BackendClient:
    """The application's backend handle, built once in create_app()."""
    return request.app.state.backend


async def get_config(request: Request) -> AdminConfig:
    return request.app.state.config


async def get_access_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    if credentials is None:
        return None
    return credentials.credentials


async def require_admin(
    backend: BackendClient = Depends(get_backend),
    config: AdminConfig = Depends(get_config),
    access_token: str | None = Depends(get_access_token),
) -> AdminContext:
    """Gate every admin route. Raises AccessDeniedError (-> 303 redirect)."""
    decision = AccessGate(backend, config.gate).check(access_token)
    if not decision.allowed:
        raise AccessDeniedError(decision)
    return AdminContext(user_id=decision.user_id or "", access_token=access_token or "")


def require_confirmation(confirm: bool, prompt: str) -> None:
    """Destructive actions need `confirm=true`; otherwise answer 428 with the prompt."""
    if not confirm:
        raise HTTPException(
            status_code=status.HTTP_428_PRECONDITION_REQUIRED,
            detail=prompt,
        )
