"""
api.dependencies - FastAPI dependency injection providers.

Routers receive services through these providers so tests can swap the
whole context with app.dependency_overrides.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Depends

from core.avatar_normalizer import AvatarNormalizer

if TYPE_CHECKING:
    from core.interfaces import IAppContext


def get_app_context() -> "IAppContext":
    """
    Get the global application context (config, game database, Enka client).

    Must be called after app startup (lifespan context).
    """
    from api.main import get_app_context as _get_ctx

    return _get_ctx()


def get_normalizer(ctx: "IAppContext" = Depends(get_app_context)) -> AvatarNormalizer:
    """Normalizer resolving asset URLs against the configured UI host."""
    return AvatarNormalizer(ui_base_url=ctx.config.ui_base_url)
