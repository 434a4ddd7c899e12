"""Backend client for the hosted Supabase project.

Wraps the `supabase` client behind the narrow set of table, auth and
storage operations the console uses. One instance is built per
application and handed to every consumer explicitly.

Usage:
    from facillit_admin.backend.client import create_backend_client

    backend = create_backend_client(config.backend)
    rows = backend.select("profiles", "id, full_name", eq={"is_verified": True})
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

import structlog
from storage3 import create_client as create_storage_client
from supabase import Client, create_client

from facillit_admin.config.app_config import BackendConfig

logger = structlog.get_logger(__name__)


# =============================================================================
# EXCEPTIONS AND DATA CLASSES
# =============================================================================


class BackendError(Exception):
    """Raised when a remote table, auth or storage call fails.

    The message is the raw remote message so the console can show it as-is.
    """

    def __init__(self, message: str, operation: str = ""):
        self.message = message
        self.operation = operation
        super().__init__(message)


@dataclass
class AuthUser:
    """The authenticated identity behind an access token."""

    id: str
    email: str | None = None


def _error_message(exc: Exception) -> str:
    """Extract the human-readable message from a remote library error."""
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or exc.__class__.__name__


@contextmanager
def _translate_errors(operation: str, **context: Any) -> Iterator[None]:
    """Turn any remote failure into BackendError, logging it once."""
    try:
        yield
    except BackendError:
        raise
    except Exception as e:
        message = _error_message(e)
        logger.warning("backend_call_failed", operation=operation, error=message, **context)
        raise BackendError(message, operation=operation) from e


# =============================================================================
# CLIENT
# =============================================================================


class BackendClient:
    """Table, auth and storage operations against the hosted backend.

    Table calls take an optional access token so row-level security is
    evaluated as the signed-in administrator. Without a token the public
    key is used.
    """

    def __init__(self, config: BackendConfig, client: Client | None = None):
        self.config = config
        self._client = client or create_client(config.url, config.anon_key)

        logger.info("backend_client_initialized", url=config.url)

    def _table(self, table: str, access_token: str | None):
        """Return a query builder for `table` scoped to the caller's token."""
        self._client.postgrest.auth(access_token or self.config.anon_key)
        return self._client.table(table)

    def _storage(self, access_token: str | None):
        """Storage client acting as the caller; the shared anon client without a token."""
        if not access_token:
            return self._client.storage
        return create_storage_client(
            f"{self.config.url.rstrip('/')}/storage/v1",
            {
                "apiKey": self.config.anon_key,
                "Authorization": f"Bearer {access_token}",
            },
            is_async=False,
        )

    # -------------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------------

    def select(
        self,
        table: str,
        columns: str = "*",
        *,
        eq: dict[str, Any] | None = None,
        in_: dict[str, list[Any]] | None = None,
        order_by: str | None = None,
        descending: bool = True,
        access_token: str | None = None,
    ) -> list[dict[str, Any]]:
        """Read rows from `table`.

        Args:
            table: Table name
            columns: Column projection ("*" or comma-separated names)
            eq: Equality predicates, all combined with AND
            in_: Membership predicates (column -> allowed values)
            order_by: Column to sort by
            descending: Sort direction when order_by is set
            access_token: Caller's JWT

        Returns:
            List of row dicts (possibly empty)
        """
        with _translate_errors("select", table=table):
            query = self._table(table, access_token).select(columns)
            for column, value in (eq or {}).items():
                query = query.eq(column, value)
            for column, values in (in_ or {}).items():
                query = query.in_(column, values)
            if order_by:
                query = query.order(order_by, desc=descending)
            response = query.execute()
        return list(response.data or [])

    def select_one(
        self,
        table: str,
        columns: str = "*",
        *,
        eq: dict[str, Any],
        access_token: str | None = None,
    ) -> dict[str, Any] | None:
        """Read a single row, or None when no row matches."""
        with _translate_errors("select_one", table=table):
            query = self._table(table, access_token).select(columns)
            for column, value in eq.items():
                query = query.eq(column, value)
            response = query.limit(1).execute()
        rows = response.data or []
        return rows[0] if rows else None

    def count(
        self,
        table: str,
        *,
        eq: dict[str, Any] | None = None,
        access_token: str | None = None,
    ) -> int:
        """Exact row count, without transferring rows."""
        with _translate_errors("count", table=table):
            query = self._table(table, access_token).select("*", count="exact", head=True)
            for column, value in (eq or {}).items():
                query = query.eq(column, value)
            response = query.execute()
        return response.count or 0

    def insert(
        self,
        table: str,
        payload: dict[str, Any],
        *,
        access_token: str | None = None,
    ) -> list[dict[str, Any]]:
        """Insert one row and return what the backend echoed back."""
        with _translate_errors("insert", table=table):
            response = self._table(table, access_token).insert(payload).execute()
        return list(response.data or [])

    def update(
        self,
        table: str,
        payload: dict[str, Any],
        *,
        eq: dict[str, Any],
        access_token: str | None = None,
    ) -> list[dict[str, Any]]:
        """Update the rows matching `eq`."""
        with _translate_errors("update", table=table):
            query = self._table(table, access_token).update(payload)
            for column, value in eq.items():
                query = query.eq(column, value)
            response = query.execute()
        return list(response.data or [])

    def delete(
        self,
        table: str,
        *,
        eq: dict[str, Any],
        access_token: str | None = None,
    ) -> None:
        """Physically delete the rows matching `eq`."""
        with _translate_errors("delete", table=table):
            query = self._table(table, access_token).delete()
            for column, value in eq.items():
                query = query.eq(column, value)
            query.execute()

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    def get_user(self, access_token: str) -> AuthUser | None:
        """Resolve the identity behind a JWT, or None when there is none."""
        with _translate_errors("get_user"):
            response = self._client.auth.get_user(access_token)
        if response is None or response.user is None:
            return None
        return AuthUser(id=str(response.user.id), email=response.user.email)

    def sign_out(self, access_token: str) -> None:
        """Revoke the session the JWT belongs to."""
        with _translate_errors("sign_out"):
            self._client.auth.admin.sign_out(access_token)

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        *,
        content_type: str,
        upsert: bool = True,
        access_token: str | None = None,
    ) -> str:
        """Upload bytes to `bucket/path`, overwriting when `upsert` is set.

        With `access_token` the upload runs as the caller, so storage
        policies see the signed-in administrator.

        Returns:
            The stored object path
        """
        with _translate_errors("upload", bucket=bucket, path=path):
            self._storage(access_token).from_(bucket).upload(
                path,
                data,
                file_options={
                    "content-type": content_type,
                    "upsert": "true" if upsert else "false",
                },
            )
        logger.info("storage_object_uploaded", bucket=bucket, path=path, size=len(data))
        return path

    def public_url(self, bucket: str, path: str) -> str:
        """Public URL of an uploaded object."""
        with _translate_errors("public_url", bucket=bucket, path=path):
            url = self._client.storage.from_(bucket).get_public_url(path)
        return url.rstrip("?")


def create_backend_client(config: BackendConfig) -> BackendClient:
    """Build the application's backend handle from configuration."""
    return BackendClient(config)
