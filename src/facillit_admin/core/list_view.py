"""Snapshot-backed list views.

A list view holds the last rows read from one remote table. Row actions
call the backend first. The snapshot is patched only after the remote
call succeeded. When the call fails, `error` carries the remote message
and the snapshot keeps its previous value.
"""

from __future__ import annotations

from typing import Any, Callable

import structlog

from facillit_admin.backend.client import BackendClient, BackendError

logger = structlog.get_logger(__name__)

Row = dict[str, Any]


class SnapshotListView:
    """Base class for the students, achievements and themes lists.

    Subclasses set `table`, `columns` and `read_error_message`, and may
    override `_query()` to add predicates.
    """

    table: str = ""
    columns: str = "*"
    order_by: str = "created_at"
    read_error_message: str = "Falha ao buscar registros."

    def __init__(self, backend: BackendClient, access_token: str | None = None):
        self.backend = backend
        self.access_token = access_token
        self.rows: list[Row] = []
        self.error: str | None = None
        self.success: str | None = None

    def clear_messages(self) -> None:
        self.error = None
        self.success = None

    def _query(self) -> list[Row]:
        return self.backend.select(
            self.table,
            self.columns,
            order_by=self.order_by,
            descending=True,
            access_token=self.access_token,
        )

    def load(self) -> list[Row]:
        """Read the table into the snapshot.

        On failure the snapshot is empty and `error` holds the read message.
        """
        try:
            self.rows = self._query()
        except BackendError as e:
            logger.error("list_load_failed", table=self.table, error=e.message)
            self.rows = []
            self.error = self.read_error_message
        else:
            logger.debug("list_loaded", table=self.table, count=len(self.rows))
        return self.rows

    def find(self, row_id: Any) -> Row | None:
        for row in self.rows:
            if row.get("id") == row_id:
                return row
        return None

    def _run_remote(self, action: str, call: Callable[[], Any], row_id: Any) -> bool:
        """Run one remote mutation. Returns False and sets `error` on failure."""
        try:
            call()
        except BackendError as e:
            self.error = e.message
            logger.warning(f"{action}_failed", table=self.table, row_id=row_id, error=e.message)
            return False
        logger.info(f"{action}_succeeded", table=self.table, row_id=row_id)
        return True

    def _patch_row(self, row_id: Any, changes: Row) -> None:
        self.rows = [
            {**row, **changes} if row.get("id") == row_id else row
            for row in self.rows
        ]

    def _remove_row(self, row_id: Any) -> None:
        self.rows = [row for row in self.rows if row.get("id") != row_id]

    def delete(self, row_id: Any) -> bool:
        """Physically delete one row, then drop it from the snapshot.

        Returns:
            True when the remote delete succeeded.
        """
        ok = self._run_remote(
            "row_delete",
            lambda: self.backend.delete(
                self.table, eq={"id": row_id}, access_token=self.access_token
            ),
            row_id,
        )
        if ok:
            self._remove_row(row_id)
        return ok
