"""
api.routers.enka - Enka.Network snapshot proxy.

Forwards a UID lookup to Enka.Network with the app's User-Agent, rate limit
and cache, and relays the upstream status on failure.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_app_context

if TYPE_CHECKING:
    from core.interfaces import IAppContext

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/enka/{uid}")
def get_enka_snapshot(
    uid: str,
    ctx: "IAppContext" = Depends(get_app_context),
) -> Any:
    """
    Return the raw Enka.Network payload for a UID.

    Errors come back as ``{"error": message}`` with the upstream HTTP
    status, or 500 when no upstream status is available.
    """
    result = ctx.enka_client.fetch_raw(uid)
    if result.is_err():
        error = result.error
        logger.info(f"Enka proxy for UID {uid!r} failed: {error}")
        return JSONResponse(status_code=error.status or 500, content=error.to_dict())
    return result.unwrap()
