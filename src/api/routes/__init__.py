"""API route exports."""

from api.routes.audits import router as audits_router
from api.routes.checks import router as checks_router
from api.routes.health import router as health_router

__all__ = ["audits_router", "checks_router", "health_router"]
