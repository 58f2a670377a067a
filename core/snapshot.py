"""
Snapshot schema - pydantic models for the Enka.Network profile payload.

The payload is validated here, once, at the load boundary. Validation is
field-level: a malformed optional field falls back to its default, and a
bad entry in a list or map (an equipment item, a fight prop, a substat) is
dropped on its own, each with a warning. Only an avatar without a usable
``avatarId`` is rejected, and in a whole snapshot that avatar is skipped.
"""
from __future__ import annotations

import logging
from typing import Annotated, Any, Callable, Dict, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from core.result import Err, Ok, Result

logger = logging.getLogger(__name__)

_INT = TypeAdapter(int)
_FINITE_FLOAT = TypeAdapter(Annotated[float, Field(allow_inf_nan=False)])


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def _default_on_error(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        """Wrap validator body: malformed values become the field default."""
        try:
            return handler(value)
        except ValidationError as e:
            default = cls.model_fields[info.field_name].get_default(call_default_factory=True)
            logger.warning(f"{_where(cls, info)}: {_summarize(e)}; using {default!r}")
            return default


class PropMapItem(_Payload):
    type: Optional[int] = None
    ival: Optional[Union[str, int]] = None
    val: Optional[Union[str, int, float]] = None

    @field_validator("type", "ival", "val", mode="wrap")
    @classmethod
    def default_on_error(cls, value, handler, info):
        return cls._default_on_error(value, handler, info)


class ReliquaryMainstat(_Payload):
    main_prop_id: str = Field(alias="mainPropId")
    stat_value: float = Field(default=0.0, alias="statValue")

    @field_validator("stat_value", mode="wrap")
    @classmethod
    def default_on_error(cls, value, handler, info):
        return cls._default_on_error(value, handler, info)


class AppendStat(_Payload):
    """A reliquary substat or a weapon stat line."""
    append_prop_id: str = Field(alias="appendPropId")
    stat_value: float = Field(default=0.0, alias="statValue")

    @field_validator("stat_value", mode="wrap")
    @classmethod
    def default_on_error(cls, value, handler, info):
        return cls._default_on_error(value, handler, info)


class FlatInfo(_Payload):
    item_type: str = Field(alias="itemType")
    rank_level: Optional[int] = Field(default=None, alias="rankLevel")
    icon: str = ""
    name_text_map_hash: Optional[Union[str, int]] = Field(default=None, alias="nameTextMapHash")
    set_name_text_map_hash: Optional[Union[str, int]] = Field(default=None, alias="setNameTextMapHash")
    equip_type: Optional[str] = Field(default=None, alias="equipType")
    reliquary_mainstat: Optional[ReliquaryMainstat] = Field(default=None, alias="reliquaryMainstat")
    reliquary_substats: List[AppendStat] = Field(default_factory=list, alias="reliquarySubstats")
    weapon_stats: List[AppendStat] = Field(default_factory=list, alias="weaponStats")

    @field_validator(
        "rank_level", "icon", "name_text_map_hash", "set_name_text_map_hash",
        "equip_type", "reliquary_mainstat", mode="wrap",
    )
    @classmethod
    def default_on_error(cls, value, handler, info):
        return cls._default_on_error(value, handler, info)

    @field_validator("reliquary_substats", "weapon_stats", mode="before")
    @classmethod
    def skip_bad_stats(cls, value, info):
        return _valid_items(value, AppendStat.model_validate, _where(cls, info))


class ReliquaryInfo(_Payload):
    level: Optional[int] = None
    main_prop_id: Optional[int] = Field(default=None, alias="mainPropId")
    append_prop_id_list: List[int] = Field(default_factory=list, alias="appendPropIdList")

    @field_validator("level", "main_prop_id", mode="wrap")
    @classmethod
    def default_on_error(cls, value, handler, info):
        return cls._default_on_error(value, handler, info)

    @field_validator("append_prop_id_list", mode="before")
    @classmethod
    def skip_bad_ids(cls, value, info):
        return _valid_items(value, _INT.validate_python, _where(cls, info))


class WeaponInfo(_Payload):
    level: Optional[int] = None
    promote_level: Optional[int] = Field(default=None, alias="promoteLevel")
    affix_map: Optional[Dict[str, int]] = Field(default=None, alias="affixMap")

    @field_validator("level", "promote_level", mode="wrap")
    @classmethod
    def default_on_error(cls, value, handler, info):
        return cls._default_on_error(value, handler, info)

    @field_validator("affix_map", mode="before")
    @classmethod
    def skip_bad_affixes(cls, value, info):
        return _valid_entries(value, str, _INT.validate_python, _where(cls, info))


class EquipItem(_Payload):
    item_id: int = Field(alias="itemId")
    flat: FlatInfo
    reliquary: Optional[ReliquaryInfo] = None
    weapon: Optional[WeaponInfo] = None

    @field_validator("reliquary", "weapon", mode="wrap")
    @classmethod
    def default_on_error(cls, value, handler, info):
        return cls._default_on_error(value, handler, info)


class AvatarInfo(_Payload):
    """One showcased character. ``avatarId`` is the only required field."""
    avatar_id: int = Field(alias="avatarId")
    prop_map: Dict[str, PropMapItem] = Field(default_factory=dict, alias="propMap")
    fight_prop_map: Dict[int, float] = Field(default_factory=dict, alias="fightPropMap")
    skill_depot_id: Optional[int] = Field(default=None, alias="skillDepotId")
    inherent_proud_skill_list: List[int] = Field(default_factory=list, alias="inherentProudSkillList")
    skill_level_map: Dict[str, int] = Field(default_factory=dict, alias="skillLevelMap")
    proud_skill_extra_level_map: Dict[str, int] = Field(default_factory=dict, alias="proudSkillExtraLevelMap")
    talent_id_list: List[int] = Field(default_factory=list, alias="talentIdList")
    equip_list: List[EquipItem] = Field(default_factory=list, alias="equipList")

    @field_validator("skill_depot_id", mode="wrap")
    @classmethod
    def default_on_error(cls, value, handler, info):
        return cls._default_on_error(value, handler, info)

    @field_validator("prop_map", mode="before")
    @classmethod
    def skip_bad_props(cls, value, info):
        return _valid_entries(value, str, PropMapItem.model_validate, _where(cls, info))

    @field_validator("fight_prop_map", mode="before")
    @classmethod
    def skip_bad_fight_props(cls, value, info):
        # NaN and infinity are dropped like any other malformed value
        return _valid_entries(value, _INT.validate_python, _FINITE_FLOAT.validate_python, _where(cls, info))

    @field_validator("skill_level_map", "proud_skill_extra_level_map", mode="before")
    @classmethod
    def skip_bad_levels(cls, value, info):
        return _valid_entries(value, str, _INT.validate_python, _where(cls, info))

    @field_validator("inherent_proud_skill_list", "talent_id_list", mode="before")
    @classmethod
    def skip_bad_ids(cls, value, info):
        return _valid_items(value, _INT.validate_python, _where(cls, info))

    @field_validator("equip_list", mode="before")
    @classmethod
    def skip_bad_equipment(cls, value, info):
        return _valid_items(value, EquipItem.model_validate, _where(cls, info))


class ShowAvatarInfo(_Payload):
    avatar_id: int = Field(alias="avatarId")
    level: Optional[int] = None

    @field_validator("level", mode="wrap")
    @classmethod
    def default_on_error(cls, value, handler, info):
        return cls._default_on_error(value, handler, info)


class PlayerInfo(_Payload):
    nickname: str = ""
    level: Optional[int] = None
    world_level: Optional[int] = Field(default=None, alias="worldLevel")
    name_card_id: Optional[int] = Field(default=None, alias="nameCardId")
    signature: Optional[str] = None
    show_avatar_info_list: List[ShowAvatarInfo] = Field(default_factory=list, alias="showAvatarInfoList")

    @field_validator("nickname", "level", "world_level", "name_card_id", "signature", mode="wrap")
    @classmethod
    def default_on_error(cls, value, handler, info):
        return cls._default_on_error(value, handler, info)

    @field_validator("show_avatar_info_list", mode="before")
    @classmethod
    def skip_bad_entries(cls, value, info):
        return _valid_items(value, ShowAvatarInfo.model_validate, _where(cls, info))


class EnkaResponse(_Payload):
    """A whole profile snapshot."""
    player_info: PlayerInfo = Field(default_factory=PlayerInfo, alias="playerInfo")
    avatar_info_list: List[AvatarInfo] = Field(default_factory=list, alias="avatarInfoList")
    ttl: Optional[int] = None
    uid: Optional[Union[str, int]] = None

    @field_validator("player_info", "ttl", mode="wrap")
    @classmethod
    def default_on_error(cls, value, handler, info):
        return cls._default_on_error(value, handler, info)

    @field_validator("avatar_info_list", mode="before")
    @classmethod
    def skip_bad_avatars(cls, value, info):
        return _valid_items(value, AvatarInfo.model_validate, _where(cls, info))

    def find_avatar(self, avatar_id: int) -> Optional[AvatarInfo]:
        """Showcased avatar with the given character id, if any."""
        for avatar in self.avatar_info_list:
            if avatar.avatar_id == avatar_id:
                return avatar
        return None

    def avatar_at(self, index: int) -> Optional[AvatarInfo]:
        """Showcased avatar at a list position, if any."""
        if 0 <= index < len(self.avatar_info_list):
            return self.avatar_info_list[index]
        return None


def parse_avatar(payload: Any) -> Result[AvatarInfo, str]:
    """Validate a single avatar entry; fails only without a usable avatarId."""
    try:
        return Ok(AvatarInfo.model_validate(payload))
    except ValidationError as e:
        message = f"Invalid avatar data: {_summarize(e)}"
        logger.warning(message)
        return Err(message)


def parse_snapshot(payload: Any) -> Result[EnkaResponse, str]:
    """
    Validate a decoded Enka.Network response.

    Returns:
        Ok(EnkaResponse) or Err(message) describing the first problems found.
    """
    if not isinstance(payload, dict):
        return Err("Invalid snapshot: expected a JSON object")
    try:
        return Ok(EnkaResponse.model_validate(payload))
    except ValidationError as e:
        message = f"Invalid snapshot: {_summarize(e)}"
        logger.warning(message)
        return Err(message)


# -------------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------------


def _where(model: type, info: ValidationInfo) -> str:
    field = model.model_fields[info.field_name]
    return f"{model.__name__}.{field.alias or info.field_name}"


def _valid_items(value: Any, validate: Callable[[Any], Any], where: str) -> List[Any]:
    """Validate list entries one by one, dropping the ones that fail."""
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"{where}: expected a list, got {type(value).__name__}; using []")
        return []
    kept = []
    for index, item in enumerate(value):
        try:
            kept.append(validate(item))
        except ValidationError as e:
            logger.warning(f"{where}[{index}] skipped: {_summarize(e)}")
    return kept


def _valid_entries(
    value: Any,
    validate_key: Callable[[Any], Any],
    validate_value: Callable[[Any], Any],
    where: str,
) -> Dict[Any, Any]:
    """Validate mapping entries one by one, dropping the ones that fail."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        logger.warning(f"{where}: expected an object, got {type(value).__name__}; using {{}}")
        return {}
    kept = {}
    for key, item in value.items():
        try:
            kept[validate_key(key)] = validate_value(item)
        except ValidationError as e:
            logger.warning(f"{where}.{key} skipped: {_summarize(e)}")
    return kept


def _summarize(error: ValidationError, limit: int = 3) -> str:
    parts = []
    for item in error.errors()[:limit]:
        location = ".".join(str(loc) for loc in item["loc"])
        parts.append(f"{location}: {item['msg']}" if location else item["msg"])
    if error.error_count() > limit:
        parts.append(f"... {error.error_count() - limit} more")
    return "; ".join(parts)
