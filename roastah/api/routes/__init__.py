"""API routes module."""

from roastah.api.routes.health import router as health_router
from roastah.api.routes.preferences import router as preferences_router
from roastah.api.routes.products import router as products_router

__all__ = ["health_router", "preferences_router", "products_router"]
