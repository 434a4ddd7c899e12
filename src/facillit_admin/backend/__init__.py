"""Backend access (tables, auth, storage) for the admin console."""

from facillit_admin.backend.client import (
    AuthUser,
    BackendClient,
    BackendError,
    create_backend_client,
)

__all__ = ["AuthUser", "BackendClient", "BackendError", "create_backend_client"]
