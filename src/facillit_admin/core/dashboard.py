"""Headline numbers for the dashboard home."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from facillit_admin.backend.client import BackendClient, BackendError

logger = structlog.get_logger(__name__)


@dataclass
class DashboardStats:
    total_students: int = 0
    # No schools table exists yet
    total_schools: int = 0
    error: str | None = None


def load_dashboard_stats(backend: BackendClient, access_token: str | None = None) -> DashboardStats:
    """Count student profiles. A failed count reports zero plus an error."""
    try:
        total = backend.count("profiles", eq={"user_role": "student"}, access_token=access_token)
    except BackendError as e:
        logger.warning("dashboard_stats_failed", error=e.message)
        return DashboardStats(error="Falha ao carregar estatísticas.")
    return DashboardStats(total_students=total)
