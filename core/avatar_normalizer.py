"""
Avatar Normalizer.

Maps one showcased avatar from an Enka.Network snapshot onto a BuildData,
resolving ids through the game database and stat codes through the
StatCodeTranslator.

Every lookup miss or missing field degrades to a default (see each helper);
normalize() itself never raises.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Mapping, Optional, Union

from core.build_models import (
    Artifact,
    ArtifactSlot,
    ArtifactSlots,
    BuildData,
    Character,
    Element,
    StatEntry,
    Stats,
    Talent,
    Talents,
    Weapon,
    parse_int,
)
from core.constants import (
    AVATAR_ICON_PREFIX,
    ENKA_UI_BASE_URL,
    FIGHT_PROP_CHARGE_EFFICIENCY,
    FIGHT_PROP_CRITICAL,
    FIGHT_PROP_CRITICAL_HURT,
    FIGHT_PROP_CUR_ATTACK,
    FIGHT_PROP_CUR_DEFENSE,
    FIGHT_PROP_DAMAGE_BONUS_KEYS,
    FIGHT_PROP_ELEMENT_MASTERY,
    FIGHT_PROP_MAX_HP,
    GACHA_IMAGE_PREFIX,
    ITEM_TYPE_RELIQUARY,
    ITEM_TYPE_WEAPON,
    MAX_CONSTELLATION,
    MAX_SUBSTATS,
    PROP_LEVEL,
)
from core.game_data import CharacterRecord, SkillRecord
from core.interfaces import IGameDatabase
from core.snapshot import AvatarInfo, EquipItem, parse_avatar
from core.stat_translator import StatCodeTranslator, default_translator

logger = logging.getLogger(__name__)

# Enka equipType -> card slot
EQUIP_TYPE_SLOTS: Dict[str, ArtifactSlot] = {
    "EQUIP_BRACER": ArtifactSlot.FLOWER,
    "EQUIP_NECKLACE": ArtifactSlot.PLUME,
    "EQUIP_SHOES": ArtifactSlot.SANDS,
    "EQUIP_RING": ArtifactSlot.GOBLET,
    "EQUIP_DRESS": ArtifactSlot.CIRCLET,
}

DEFAULT_ELEMENT = Element.ANEMO
UNKNOWN_SET = "Unknown"


class AvatarNormalizer:
    """
    Builds a BuildData from a snapshot avatar.

    Holds only immutable collaborators, so one instance can be shared and
    called repeatedly.
    """

    def __init__(
        self,
        translator: Optional[StatCodeTranslator] = None,
        ui_base_url: str = ENKA_UI_BASE_URL,
    ):
        self.translator = translator or default_translator
        self.ui_base_url = ui_base_url.rstrip("/")

    def normalize(
        self,
        avatar: Union[AvatarInfo, Mapping[str, Any]],
        game_db: IGameDatabase,
        current: BuildData,
    ) -> BuildData:
        """
        Produce a new build from one avatar.

        Args:
            avatar: Validated AvatarInfo or a raw avatar mapping
            game_db: Static lookup for names and icons
            current: Build whose artifact slots are kept when the avatar has
                no piece equipped there, and whose score base is preserved

        Returns:
            A new BuildData; ``current`` is left untouched. Malformed fields
            of a raw mapping fall back to their defaults; only a mapping
            without a usable avatarId returns ``current`` as-is.
        """
        if not isinstance(avatar, AvatarInfo):
            parsed = parse_avatar(avatar)
            if parsed.is_err():
                logger.error(f"Cannot normalize avatar: {parsed.error}")
                return current
            avatar = parsed.unwrap()

        record = game_db.get_character(avatar.avatar_id)
        if record is None:
            logger.debug(f"Character {avatar.avatar_id} not in game database")

        return replace(
            current,
            character=self._character(avatar, record, current.character),
            weapon=self._weapon(avatar, game_db, current.weapon),
            artifacts=self._artifacts(avatar, game_db, current.artifacts),
            stats=self._stats(avatar),
        )

    # ------------------------------------------------------------------
    # Character
    # ------------------------------------------------------------------

    def _character(
        self,
        avatar: AvatarInfo,
        record: Optional[CharacterRecord],
        current: Character,
    ) -> Character:
        if record is not None:
            name = record.name or f"Unknown ({avatar.avatar_id})"
            element = Element.from_string(record.element, DEFAULT_ELEMENT) if record.element else DEFAULT_ELEMENT
            image_url = self._gacha_image_url(record.icon)
        else:
            name = f"Unknown ({avatar.avatar_id})"
            element = DEFAULT_ELEMENT
            image_url = ""

        skills = record.skills if record is not None else None
        talents = Talents(
            normal=self._talent(avatar, skills.normal if skills else None),
            skill=self._talent(avatar, skills.skill if skills else None),
            burst=self._talent(avatar, skills.burst if skills else None),
        )

        constellation_icons = None
        if record is not None and record.constellations is not None:
            constellation_icons = tuple(self._ui_url(icon) for icon in record.constellations)

        return replace(
            current,
            name=name,
            level=_level_from_props(avatar),
            constellation=min(len(avatar.talent_id_list), MAX_CONSTELLATION),
            element=element,
            image_url=image_url,
            talents=talents,
            constellation_icons=constellation_icons,
        )

    def _talent(self, avatar: AvatarInfo, skill: Optional[SkillRecord]) -> Talent:
        """Base level from skillLevelMap plus constellation bonus levels."""
        if skill is None:
            return Talent(level=0, boosted=False, icon="")

        base = avatar.skill_level_map.get(str(skill.id), 0)
        bonus = 0
        if skill.proud_skill_group_id:
            bonus = avatar.proud_skill_extra_level_map.get(str(skill.proud_skill_group_id), 0)

        return Talent(
            level=base + bonus,
            boosted=bonus > 0,
            icon=self._ui_url(skill.icon) if skill.icon else "",
        )

    # ------------------------------------------------------------------
    # Weapon
    # ------------------------------------------------------------------

    def _weapon(self, avatar: AvatarInfo, game_db: IGameDatabase, current: Weapon) -> Weapon:
        item = next(
            (e for e in avatar.equip_list if e.flat.item_type == ITEM_TYPE_WEAPON),
            None,
        )
        if item is None:
            logger.warning(f"Avatar {avatar.avatar_id} has no weapon equipped")
            return replace(
                current,
                name="Unknown",
                level=0,
                refinement=1,
                image_url="",
                main_stat=None,
                sub_stat=None,
                rarity=1,
            )

        record = game_db.get_weapon(item.item_id)
        if record is None:
            logger.debug(f"Weapon {item.item_id} not in game database")

        weapon_info = item.weapon
        stats = item.flat.weapon_stats
        return replace(
            current,
            name=record.name if record and record.name else f"Unknown ({item.item_id})",
            level=(weapon_info.level if weapon_info and weapon_info.level else 0),
            refinement=_refinement(item),
            image_url=self._ui_url(record.icon) if record and record.icon else "",
            main_stat=self._flat_entry(stats[0].append_prop_id, stats[0].stat_value) if len(stats) > 0 else None,
            sub_stat=self._flat_entry(stats[1].append_prop_id, stats[1].stat_value) if len(stats) > 1 else None,
            rarity=item.flat.rank_level or 1,
        )

    # ------------------------------------------------------------------
    # Artifacts
    # ------------------------------------------------------------------

    def _artifacts(
        self,
        avatar: AvatarInfo,
        game_db: IGameDatabase,
        current: ArtifactSlots,
    ) -> ArtifactSlots:
        """Replace each slot that has an equipped piece; keep the rest."""
        merged = current
        for item in avatar.equip_list:
            if item.flat.item_type != ITEM_TYPE_RELIQUARY:
                continue
            slot = EQUIP_TYPE_SLOTS.get(item.flat.equip_type or "")
            if slot is None:
                logger.warning(f"Reliquary {item.item_id} has unknown equip type {item.flat.equip_type!r}")
                continue
            merged = merged.with_artifact(self._artifact(item, slot, game_db, merged[slot]))
        return merged

    def _artifact(
        self,
        item: EquipItem,
        slot: ArtifactSlot,
        game_db: IGameDatabase,
        current: Artifact,
    ) -> Artifact:
        record = game_db.get_artifact_piece(item.item_id)
        if record is None:
            logger.debug(f"Artifact piece {item.item_id} not in game database")

        set_name = None
        if record is not None and record.set_id:
            set_name = game_db.get_set_name(record.set_id)
        if not set_name:
            set_name = record.name if record is not None and record.name else UNKNOWN_SET

        raw_level = item.reliquary.level if item.reliquary else None
        main = item.flat.reliquary_mainstat
        if main is not None:
            main_stat = self._flat_entry(main.main_prop_id, main.stat_value)
        else:
            logger.warning(f"Artifact {item.item_id} has no main stat")
            main_stat = StatEntry(label="Main", value="0")

        substats = item.flat.reliquary_substats
        if len(substats) > MAX_SUBSTATS:
            logger.warning(f"Artifact {item.item_id} has {len(substats)} substats; keeping {MAX_SUBSTATS}")

        return replace(
            current,
            set=set_name,
            # Snapshot levels are 1-indexed (+0 artifact == level 1)
            level=raw_level - 1 if raw_level else 0,
            image_url=self._ui_url(record.icon) if record is not None and record.icon else None,
            main_stat=main_stat,
            sub_stats=tuple(
                self._flat_entry(s.append_prop_id, s.stat_value) for s in substats[:MAX_SUBSTATS]
            ),
            rarity=item.flat.rank_level,
        )

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    @staticmethod
    def _stats(avatar: AvatarInfo) -> Stats:
        props = avatar.fight_prop_map

        def flat(key: int) -> int:
            return int(round(props.get(key, 0.0)))

        def percent(key: int) -> float:
            return round(props.get(key, 0.0) * 100, 1)

        dmg_bonus = max((props.get(key, 0.0) for key in FIGHT_PROP_DAMAGE_BONUS_KEYS), default=0.0)

        return Stats(
            hp=flat(FIGHT_PROP_MAX_HP),
            atk=flat(FIGHT_PROP_CUR_ATTACK),
            def_=flat(FIGHT_PROP_CUR_DEFENSE),
            em=flat(FIGHT_PROP_ELEMENT_MASTERY),
            cr=percent(FIGHT_PROP_CRITICAL),
            cd=percent(FIGHT_PROP_CRITICAL_HURT),
            er=percent(FIGHT_PROP_CHARGE_EFFICIENCY),
            dmg_bonus=round(dmg_bonus * 100, 1),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _flat_entry(self, code: str, value: float) -> StatEntry:
        # Equipment stats arrive in display units (46.6 for 46.6%)
        return self.translator.to_entry(code, value, ratio=False)

    def _ui_url(self, icon: str) -> str:
        return f"{self.ui_base_url}/{icon}.png"

    def _gacha_image_url(self, icon: str) -> str:
        if not icon:
            return ""
        return self._ui_url(icon.replace(AVATAR_ICON_PREFIX, GACHA_IMAGE_PREFIX))


def _level_from_props(avatar: AvatarInfo) -> int:
    item = avatar.prop_map.get(PROP_LEVEL)
    if item is None or item.val is None:
        logger.debug(f"Avatar {avatar.avatar_id} has no level property")
        return 0
    level = parse_int(item.val)
    if level is None:
        logger.warning(f"Avatar {avatar.avatar_id} has non-numeric level {item.val!r}")
        return 0
    return level


def _refinement(item: EquipItem) -> int:
    """Refinement rank is the affix index (0-based) plus one."""
    affix_map = item.weapon.affix_map if item.weapon else None
    if not affix_map:
        return 1
    return next(iter(affix_map.values())) + 1


_default_normalizer = AvatarNormalizer()


def normalize(
    avatar: Union[AvatarInfo, Mapping[str, Any]],
    game_db: IGameDatabase,
    current: BuildData,
) -> BuildData:
    """Normalize with the default translator and Enka UI asset URLs."""
    return _default_normalizer.normalize(avatar, game_db, current)
