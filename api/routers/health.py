"""
api.routers.health - Health check endpoints.

Provides endpoints for monitoring service health and status, and for
reading and changing settings.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException

from api import __version__
from api.models import ConfigResponse, ConfigUpdate, HealthResponse
from api.dependencies import get_app_context

if TYPE_CHECKING:
    from core.config import Config
    from core.interfaces import IAppContext

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    ctx: "IAppContext" = Depends(get_app_context),
) -> HealthResponse:
    """
    Check API health status.

    The service is "degraded" when the game database is empty: builds still
    normalize, but names and icons come back unresolved.
    """
    counts = ctx.game_db.counts()
    services = {
        "game_data": "loaded" if counts.get("characters") else "empty",
        "enka_client": "available" if ctx.enka_client is not None else "unavailable",
    }
    overall_status = "healthy" if services["game_data"] == "loaded" else "degraded"
    cache = ctx.enka_client.cache.stats() if ctx.enka_client is not None else {}

    return HealthResponse(
        status=overall_status,
        version=__version__,
        game_data=counts,
        services=services,
        cache=cache,
    )


@router.get("/health/ready")
async def readiness_check(
    ctx: "IAppContext" = Depends(get_app_context),
) -> dict[str, str]:
    """
    Kubernetes-style readiness check.

    Returns 200 once the game database has character records.
    """
    if not ctx.game_db.counts().get("characters"):
        raise HTTPException(status_code=503, detail="Not ready: game database is empty")
    return {"status": "ready"}


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Kubernetes-style liveness check.

    Returns 200 if the service is alive (even if not fully ready).
    """
    return {"status": "alive"}


def _config_response(config: "Config") -> ConfigResponse:
    connect, read = config.get_api_timeouts()
    return ConfigResponse(
        score_base=config.score_base.value,
        enka_base_url=config.enka_base_url,
        rate_limit_per_second=config.api_rate_limit,
        cache_ttl_seconds=config.cache_ttl_seconds,
        connect_timeout_seconds=connect,
        read_timeout_seconds=read,
    )


@router.get("/config", response_model=ConfigResponse)
async def get_config(
    ctx: "IAppContext" = Depends(get_app_context),
) -> ConfigResponse:
    """Return non-sensitive configuration values."""
    return _config_response(ctx.config)


@router.put("/config", response_model=ConfigResponse)
async def update_config(
    update: ConfigUpdate,
    ctx: "IAppContext" = Depends(get_app_context),
) -> ConfigResponse:
    """
    Change settings and persist them to the config file.

    Omitted fields keep their value. Changing an Enka.Network setting
    replaces the API client, which also empties its response cache.
    """
    config = ctx.config
    if update.score_base is not None:
        config.score_base = update.score_base
    if update.enka_base_url is not None:
        config.enka_base_url = update.enka_base_url
    if update.rate_limit_per_second is not None:
        config.api_rate_limit = update.rate_limit_per_second
    if update.connect_timeout_seconds is not None or update.read_timeout_seconds is not None:
        connect, read = config.get_api_timeouts()
        config.set_api_timeouts(
            update.connect_timeout_seconds or connect,
            update.read_timeout_seconds or read,
        )

    changed = update.model_dump(exclude_none=True).keys()
    if changed - {"score_base"}:
        ctx.reload_client()
    logger.info(f"Config updated: {', '.join(sorted(changed)) or 'no changes'}")
    return _config_response(config)


@router.post("/config/reset", response_model=ConfigResponse)
async def reset_config(
    ctx: "IAppContext" = Depends(get_app_context),
) -> ConfigResponse:
    """Restore default settings and rebuild the API client."""
    ctx.config.reset_to_defaults()
    ctx.reload_client()
    return _config_response(ctx.config)
