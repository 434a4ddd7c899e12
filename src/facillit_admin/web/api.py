"""FastAPI application factory.

Main entry point for the Facillit Admin Web API. Serve with:

    uvicorn --factory facillit_admin.web.api:create_app
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from facillit_admin import __version__
from facillit_admin.backend.client import BackendClient, BackendError, create_backend_client
from facillit_admin.config.app_config import AdminConfig, load_app_config
from facillit_admin.core.access_gate import AccessDeniedError
from facillit_admin.core.forms import FormValidationError
from facillit_admin.web.routes import (
    achievements_router,
    auth_router,
    dashboard_router,
    health_router,
    students_router,
    themes_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    config: AdminConfig = app.state.config
    logger.info(
        "api_startup",
        backend_url=config.backend.url,
        storage_bucket=config.storage.bucket,
        entry_route=config.gate.entry_route,
    )
    yield
    logger.info("api_shutdown")


async def _access_denied_handler(request: Request, exc: AccessDeniedError) -> RedirectResponse:
    return RedirectResponse(
        exc.decision.redirect_to or "/",
        status_code=status.HTTP_303_SEE_OTHER,
    )


async def _backend_error_handler(request: Request, exc: BackendError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": exc.message},
    )


async def _validation_error_handler(request: Request, exc: FormValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message},
    )


def create_app(
    config: AdminConfig | None = None,
    backend: BackendClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Loaded configuration (read from the environment if omitted)
        backend: Backend handle (built from `config` if omitted)

    Returns:
        Configured FastAPI app instance

    Raises:
        ConfigError: If the backend endpoint or key is not configured
    """
    config = config or load_app_config()
    backend = backend or create_backend_client(config.backend)

    app = FastAPI(
        title="Facillit Admin API",
        description="Administrative console for the Facillit platform",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.backend = backend

    # CORS middleware for the console front-end
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AccessDeniedError, _access_denied_handler)
    app.add_exception_handler(BackendError, _backend_error_handler)
    app.add_exception_handler(FormValidationError, _validation_error_handler)

    # Include routers
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(dashboard_router)
    app.include_router(students_router)
    app.include_router(achievements_router)
    app.include_router(themes_router)

    return app
