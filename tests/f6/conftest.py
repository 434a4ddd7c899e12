"""Shared fixtures for Web API tests (F6)."""

import pytest
from fastapi.testclient import TestClient

from facillit_admin.web.api import create_app

ADMIN_HEADERS = {"Authorization": "Bearer admin-token"}


@pytest.fixture
def app(admin_config, backend):
    """App wired to the in-memory backend, with a signed-in admin."""
    backend.add_admin()
    return create_app(config=admin_config, backend=backend)


@pytest.fixture
def client(app):
    """Test client that does not follow the gate's redirects."""
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)
