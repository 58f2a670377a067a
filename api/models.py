"""
api.models - Pydantic models for API request/response schemas.

Request and response bodies use the build card's camelCase keys; field
names stay snake_case and map through aliases.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.build_editor import EDIT_OPS
from core.build_models import Artifact, ArtifactSlot, ScoreBase, StatEntry
from core.constants import MAX_SUBSTATS


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ==============================================================================
# Build Models
# ==============================================================================


class StatEntryModel(_CamelModel):
    """A display-ready stat line."""

    label: str = Field(..., examples=["会心率"])
    value: str = Field(..., examples=["10.5%"])

    def to_entry(self) -> StatEntry:
        return StatEntry(label=self.label, value=self.value)


class ArtifactModel(_CamelModel):
    """One artifact as shown on the card."""

    slot: ArtifactSlot = Field(..., description="flower, plume, sands, goblet or circlet")
    set: str = Field(default="", description="Artifact set label")
    level: int = Field(default=0, ge=0, le=20)
    main_stat: StatEntryModel = Field(
        default_factory=lambda: StatEntryModel(label="Main", value="0"),
        alias="mainStat",
    )
    sub_stats: list[StatEntryModel] = Field(
        default_factory=list, alias="subStats", max_length=MAX_SUBSTATS
    )
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    rarity: Optional[int] = Field(default=None, ge=1, le=5)

    @field_validator("slot", mode="before")
    @classmethod
    def _parse_slot(cls, value: Any) -> Any:
        # Accept the Japanese slot names the card displays
        return ArtifactSlot.from_string(value) or value

    def to_artifact(self) -> Artifact:
        return Artifact(
            slot=self.slot,
            set=self.set,
            main_stat=self.main_stat.to_entry(),
            sub_stats=tuple(s.to_entry() for s in self.sub_stats),
            level=self.level,
            image_url=self.image_url,
            rarity=self.rarity,
        )


# ==============================================================================
# Score Models
# ==============================================================================


class ScoreRequest(_CamelModel):
    """Request model for scoring a set of artifacts."""

    artifacts: list[ArtifactModel] = Field(..., max_length=len(ArtifactSlot))
    score_base: ScoreBase = Field(default=ScoreBase.ATK, alias="scoreBase")

    @field_validator("artifacts")
    @classmethod
    def _unique_slots(cls, artifacts: list[ArtifactModel]) -> list[ArtifactModel]:
        seen: set[ArtifactSlot] = set()
        for artifact in artifacts:
            if artifact.slot in seen:
                raise ValueError(f"duplicate slot: {artifact.slot.value}")
            seen.add(artifact.slot)
        return artifacts


class RankModel(_CamelModel):
    label: str = Field(..., examples=["A"])
    color: str = Field(..., examples=["#e6e600"])


class ArtifactScoreModel(_CamelModel):
    slot: ArtifactSlot
    slot_name: str = Field(..., alias="slotName", examples=["空の杯"])
    score: float = Field(..., ge=0, examples=[36.0])
    rank: RankModel


class SetBonusModel(_CamelModel):
    set: str
    count: int = Field(..., ge=2)


class ScoreResponse(_CamelModel):
    """Per-slot scores and the build total."""

    score_base: ScoreBase = Field(..., alias="scoreBase")
    score_base_label: str = Field(..., alias="scoreBaseLabel", examples=["攻撃力換算"])
    artifacts: list[ArtifactScoreModel]
    total_score: float = Field(..., alias="totalScore", ge=0)
    total_rank: RankModel = Field(..., alias="totalRank")
    set_bonuses: list[SetBonusModel] = Field(default_factory=list, alias="setBonuses")


class BuildResponse(_CamelModel):
    """A normalized build card and its score."""

    uid: str
    avatar_id: int = Field(..., alias="avatarId")
    build: dict[str, Any] = Field(..., description="BuildData in its JSON form")
    score: ScoreResponse


class BuildEditModel(_CamelModel):
    """One edit on a build card."""

    op: Literal[EDIT_OPS] = Field(..., examples=["weapon"])
    slot: Optional[str] = Field(default=None, description="Artifact slot for artifact and substat ops")
    index: Optional[int] = Field(default=None, ge=0, description="Substat position for single-substat ops")
    changes: dict[str, Any] = Field(default_factory=dict, alias="fields", examples=[{"refinement": 5}])


class BuildEditRequest(_CamelModel):
    """A build card and the edits to apply to it, in order."""

    build: dict[str, Any] = Field(default_factory=dict, description="BuildData in its JSON form")
    edits: list[BuildEditModel] = Field(default_factory=list)


class EditedBuildResponse(_CamelModel):
    """The edited build card, rescored."""

    build: dict[str, Any]
    score: ScoreResponse


# ==============================================================================
# Health & Status Models
# ==============================================================================


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Service status", examples=["healthy"])
    version: str = Field(..., description="API version", examples=["0.1.0"])
    game_data: dict[str, int] = Field(
        default_factory=dict, description="Record counts per game database table"
    )
    services: dict[str, str] = Field(
        default_factory=dict, description="Status of individual services"
    )
    cache: dict[str, int] = Field(
        default_factory=dict, description="Enka.Network response cache counters"
    )


class ConfigResponse(BaseModel):
    """Response model for configuration info."""

    score_base: str = Field(..., description="Default score base")
    enka_base_url: str = Field(..., description="Enka.Network API base URL")
    rate_limit_per_second: float = Field(..., description="Enka.Network request rate")
    cache_ttl_seconds: int = Field(..., description="Fallback snapshot cache TTL")
    connect_timeout_seconds: int = Field(..., description="Enka.Network connect timeout")
    read_timeout_seconds: int = Field(..., description="Enka.Network read timeout")


class ConfigUpdate(BaseModel):
    """Request model for changing settings; omitted fields keep their value."""

    score_base: Optional[ScoreBase] = Field(default=None, description="atk, hp, def or er")
    enka_base_url: Optional[str] = Field(default=None, min_length=1)
    rate_limit_per_second: Optional[float] = Field(
        default=None, gt=0, description="Clamped to 0.1-2.0 requests per second"
    )
    connect_timeout_seconds: Optional[int] = Field(default=None, ge=1, description="Clamped to 120")
    read_timeout_seconds: Optional[int] = Field(default=None, ge=1, description="Clamped to 300")
