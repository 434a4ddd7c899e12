"""Pytest configuration for phased testing.

Tests are organized by phase (f1, f2, ..., f6).
Only tests for the current phase and completed phases should run.
Future phase tests are automatically skipped.

Also provides an in-memory backend that mirrors BackendClient so the
console logic can be exercised without a Supabase project.
"""

from __future__ import annotations

import copy
from typing import Any

import pytest

from facillit_admin.backend.client import AuthUser, BackendError
from facillit_admin.config.app_config import AdminConfig, BackendConfig

# Current implementation phase
CURRENT_PHASE = 6

ADMIN_TOKEN = "admin-token"
STUDENT_TOKEN = "student-token"


def pytest_collection_modifyitems(config, items):
    """Skip tests from phases that haven't been implemented yet."""
    for item in items:
        # Extract phase from path (tests/f2/... -> 2)
        parts = item.fspath.strpath.split("/")
        for part in parts:
            if part.startswith("f") and part[1:].isdigit():
                test_phase = int(part[1:])
                if test_phase > CURRENT_PHASE:
                    item.add_marker(
                        pytest.mark.skip(
                            reason=f"Phase F{test_phase} not yet implemented (current: F{CURRENT_PHASE})"
                        )
                    )
                break


# =============================================================================
# FAKE BACKEND
# =============================================================================


class FakeBackend:
    """In-memory stand-in for BackendClient.

    - tables: table name -> list of row dicts
    - users: access token -> AuthUser
    - failures: operation name -> message; that operation raises BackendError
    - calls: every call as (operation, table_or_bucket, details)
    """

    PUBLIC_URL_BASE = "https://test.supabase.co/storage/v1/object/public"

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = {
            "profiles": [],
            "conquistas": [],
            "write_themes": [],
        }
        self.users: dict[str, AuthUser] = {}
        self.failures: dict[str, str] = {}
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.objects: dict[tuple[str, str], bytes] = {}
        self.signed_out: list[str] = []
        self._next_id = 1
        self._clock = 0

    # -- helpers --------------------------------------------------------------

    def _record(self, operation: str, target: str, **details: Any) -> None:
        self.calls.append((operation, target, details))
        if operation in self.failures:
            raise BackendError(self.failures[operation], operation=operation)

    def calls_for(self, operation: str) -> list[tuple[str, str, dict[str, Any]]]:
        return [c for c in self.calls if c[0] == operation]

    def _timestamp(self) -> str:
        self._clock += 1
        return f"2024-01-01T00:00:{self._clock:02d}+00:00"

    def add_row(self, table: str, **row: Any) -> dict[str, Any]:
        if "id" not in row:
            row["id"] = self._next_id
            self._next_id += 1
        row.setdefault("created_at", self._timestamp())
        self.tables[table].append(row)
        return row

    def add_user(self, token: str, user_id: str, **profile: Any) -> AuthUser:
        user = AuthUser(id=user_id, email=f"{user_id}@example.com")
        self.users[token] = user
        if profile:
            self.add_row("profiles", id=user_id, **profile)
        return user

    def add_admin(self, token: str = ADMIN_TOKEN, user_id: str = "admin-1") -> AuthUser:
        return self.add_user(token, user_id, is_admin=True, user_role="admin", full_name="Admin")

    @staticmethod
    def _matches(row, eq, in_) -> bool:
        for column, value in (eq or {}).items():
            if row.get(column) != value:
                return False
        for column, values in (in_ or {}).items():
            if row.get(column) not in values:
                return False
        return True

    @staticmethod
    def _project(row, columns: str) -> dict[str, Any]:
        if columns.strip() == "*":
            return copy.deepcopy(row)
        names = [c.strip() for c in columns.split(",")]
        return {name: copy.deepcopy(row[name]) for name in names if name in row}

    # -- tables ---------------------------------------------------------------

    def select(self, table, columns="*", *, eq=None, in_=None, order_by=None,
               descending=True, access_token=None):
        self._record("select", table, columns=columns, eq=eq, in_=in_, access_token=access_token)
        rows = [r for r in self.tables[table] if self._matches(r, eq, in_)]
        if order_by:
            rows.sort(key=lambda r: str(r.get(order_by) or ""), reverse=descending)
        return [self._project(r, columns) for r in rows]

    def select_one(self, table, columns="*", *, eq, access_token=None):
        self._record("select_one", table, columns=columns, eq=eq, access_token=access_token)
        for row in self.tables[table]:
            if self._matches(row, eq, None):
                return self._project(row, columns)
        return None

    def count(self, table, *, eq=None, access_token=None):
        self._record("count", table, eq=eq, access_token=access_token)
        return sum(1 for r in self.tables[table] if self._matches(r, eq, None))

    def insert(self, table, payload, *, access_token=None):
        self._record("insert", table, payload=copy.deepcopy(payload))
        row = self.add_row(table, **copy.deepcopy(payload))
        return [copy.deepcopy(row)]

    def update(self, table, payload, *, eq, access_token=None):
        self._record("update", table, payload=copy.deepcopy(payload), eq=eq)
        updated = []
        for row in self.tables[table]:
            if self._matches(row, eq, None):
                row.update(copy.deepcopy(payload))
                updated.append(copy.deepcopy(row))
        return updated

    def delete(self, table, *, eq, access_token=None):
        self._record("delete", table, eq=eq)
        self.tables[table] = [r for r in self.tables[table] if not self._matches(r, eq, None)]

    # -- auth -----------------------------------------------------------------

    def get_user(self, access_token):
        self._record("get_user", "auth", access_token=access_token)
        return self.users.get(access_token)

    def sign_out(self, access_token):
        self._record("sign_out", "auth", access_token=access_token)
        self.signed_out.append(access_token)

    # -- storage --------------------------------------------------------------

    def upload(self, bucket, path, data, *, content_type, upsert=True, access_token=None):
        self._record("upload", bucket, path=path, content_type=content_type, upsert=upsert,
                     access_token=access_token)
        self.objects[(bucket, path)] = data
        return path

    def public_url(self, bucket, path):
        self._record("public_url", bucket, path=path)
        return f"{self.PUBLIC_URL_BASE}/{bucket}/{path}"


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def backend() -> FakeBackend:
    """Empty in-memory backend."""
    return FakeBackend()


@pytest.fixture
def admin_config() -> AdminConfig:
    """Configuration pointing at a test project."""
    return AdminConfig(
        backend=BackendConfig(url="https://test.supabase.co", anon_key="anon-test-key-1234")
    )
