"""
api.routers.builds - Build card and scoring endpoints.

Provides endpoints for turning a showcased character into a build card, for
editing a card and for scoring artifacts entered by hand.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.models import (
    BuildEditRequest,
    BuildResponse,
    EditedBuildResponse,
    ScoreRequest,
    ScoreResponse,
)
from api.dependencies import get_app_context, get_normalizer
from core.avatar_normalizer import AvatarNormalizer
from core.build_editor import apply_edits
from core.build_models import BuildData, ScoreBase, default_build
from core.scoring import score_build

if TYPE_CHECKING:
    from core.interfaces import IAppContext

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/builds/{uid}", response_model=BuildResponse)
def get_build(
    uid: str,
    avatar_id: Optional[int] = Query(None, description="Character id; defaults to the first showcased"),
    score_base: Optional[ScoreBase] = Query(None, description="atk, hp, def or er"),
    ctx: "IAppContext" = Depends(get_app_context),
    normalizer: AvatarNormalizer = Depends(get_normalizer),
) -> BuildResponse:
    """
    Build a card for one showcased character.

    Fetches the player's snapshot, normalizes the selected character onto an
    empty build and scores its artifacts.
    """
    result = ctx.enka_client.fetch_snapshot(uid)
    if result.is_err():
        error = result.error
        raise HTTPException(status_code=error.status or 500, detail=error.message)
    snapshot = result.unwrap()

    avatar = snapshot.find_avatar(avatar_id) if avatar_id is not None else snapshot.avatar_at(0)
    if avatar is None:
        detail = (
            f"Character {avatar_id} is not showcased for UID {uid}"
            if avatar_id is not None
            else f"No characters are showcased for UID {uid}"
        )
        raise HTTPException(status_code=404, detail=detail)

    base = score_base or ctx.config.score_base
    current = replace(default_build(), score_base=base)
    build = normalizer.normalize(avatar, ctx.game_db, current)

    logger.info(f"Built card for UID {uid}, character {avatar.avatar_id}: {build.character.name}")
    return BuildResponse(
        uid=str(snapshot.uid or uid),
        avatar_id=avatar.avatar_id,
        build=build.to_dict(),
        score=ScoreResponse.model_validate(score_build(build).to_dict()),
    )


@router.post("/score", response_model=ScoreResponse)
async def score_artifacts(request: ScoreRequest) -> ScoreResponse:
    """
    Score hand-entered artifacts.

    Slots missing from the request are scored as empty artifacts.
    """
    artifacts = default_build().artifacts
    for artifact in request.artifacts:
        artifacts = artifacts.with_artifact(artifact.to_artifact())

    build = replace(default_build(), artifacts=artifacts, score_base=request.score_base)
    return ScoreResponse.model_validate(score_build(build).to_dict())


@router.patch("/builds/edit", response_model=EditedBuildResponse)
async def edit_build(request: BuildEditRequest) -> EditedBuildResponse:
    """
    Apply edits to a build card and rescore it.

    The build is read back from its JSON form, so a card returned by
    GET /builds/{uid} can be sent as is. An invalid edit rejects the whole
    request with 422.
    """
    build = BuildData.from_dict(request.build)
    build = apply_edits(build, [edit.model_dump(by_alias=True) for edit in request.edits])

    logger.debug(f"Applied {len(request.edits)} edit(s) to {build.character.name}")
    return EditedBuildResponse(
        build=build.to_dict(),
        score=ScoreResponse.model_validate(score_build(build).to_dict()),
    )
