"""Route handlers for the admin Web API."""

from facillit_admin.web.routes.health import router as health_router
from facillit_admin.web.routes.auth import router as auth_router
from facillit_admin.web.routes.dashboard import router as dashboard_router
from facillit_admin.web.routes.students import router as students_router
from facillit_admin.web.routes.achievements import router as achievements_router
from facillit_admin.web.routes.themes import router as themes_router

__all__ = [
    "health_router",
    "auth_router",
    "dashboard_router",
    "students_router",
    "achievements_router",
    "themes_router",
]
