"""API routers package."""

from api.routers.health import router as health_router
from api.routers.enka import router as enka_router
from api.routers.builds import router as builds_router

__all__ = [
    "health_router",
    "enka_router",
    "builds_router",
]
