"""
Build data models - enums and dataclasses for a character build card.

All models are frozen: a build is replaced (dataclasses.replace) rather than
mutated, whether the change comes from the normalizer or from a user edit.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from core.constants import MAX_CONSTELLATION, MAX_REFINEMENT, MIN_REFINEMENT


class Element(str, Enum):
    """Character element."""
    PYRO = "pyro"
    HYDRO = "hydro"
    ANEMO = "anemo"
    ELECTRO = "electro"
    DENDRO = "dendro"
    CRYO = "cryo"
    GEO = "geo"

    @property
    def display_name(self) -> str:
        return {
            Element.PYRO: "炎",
            Element.HYDRO: "水",
            Element.ANEMO: "風",
            Element.ELECTRO: "雷",
            Element.DENDRO: "草",
            Element.CRYO: "氷",
            Element.GEO: "岩",
        }[self]

    @classmethod
    def from_string(cls, value: Any, default: "Element | None" = None) -> Optional["Element"]:
        """Parse an element name (case-insensitive), returning default when unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return default


class ArtifactSlot(str, Enum):
    """The five fixed artifact equipment positions, in display order."""
    FLOWER = "flower"
    PLUME = "plume"
    SANDS = "sands"
    GOBLET = "goblet"
    CIRCLET = "circlet"

    @property
    def display_name(self) -> str:
        return {
            ArtifactSlot.FLOWER: "生の花",
            ArtifactSlot.PLUME: "死の羽",
            ArtifactSlot.SANDS: "時の砂",
            ArtifactSlot.GOBLET: "空の杯",
            ArtifactSlot.CIRCLET: "理の冠",
        }[self]

    @classmethod
    def from_string(cls, value: Any) -> Optional["ArtifactSlot"]:
        """Parse a slot from its value ("goblet") or display name ("空の杯")."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        try:
            return cls(text.lower())
        except ValueError:
            pass
        for slot in cls:
            if slot.display_name == text:
                return slot
        return None


class ScoreBase(str, Enum):
    """Stat family whose percent substat counts toward the artifact score."""
    ATK = "atk"
    HP = "hp"
    DEF = "def"
    ER = "er"

    @property
    def display_name(self) -> str:
        return {
            ScoreBase.ATK: "攻撃力換算",
            ScoreBase.HP: "HP換算",
            ScoreBase.DEF: "防御力換算",
            ScoreBase.ER: "元チャ効率換算",
        }[self]

    @classmethod
    def from_string(cls, value: Any) -> Optional["ScoreBase"]:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class StatEntry:
    """A display-ready stat: translated label and pre-formatted value."""
    label: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"label": self.label, "value": self.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StatEntry":
        return cls(label=str(data.get("label", "")), value=str(data.get("value", "")))


@dataclass(frozen=True)
class Talent:
    """One talent (normal attack, elemental skill or burst)."""
    level: int = 1
    boosted: bool = False
    icon: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"level": self.level, "boosted": self.boosted, "icon": self.icon}


@dataclass(frozen=True)
class Talents:
    """The three fixed talent kinds."""
    normal: Talent = field(default_factory=Talent)
    skill: Talent = field(default_factory=Talent)
    burst: Talent = field(default_factory=Talent)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "normal": self.normal.to_dict(),
            "skill": self.skill.to_dict(),
            "burst": self.burst.to_dict(),
        }


@dataclass(frozen=True)
class Character:
    """Character identity, level, constellation and talents."""
    name: str = ""
    level: int = 1
    constellation: int = 0
    element: Element = Element.PYRO
    image_url: str = ""
    talents: Talents = field(default_factory=Talents)
    constellation_icons: Optional[Tuple[str, ...]] = None

    def __post_init__(self) -> None:
        # Keep the 0..6 invariant regardless of where the value came from
        clamped = max(0, min(MAX_CONSTELLATION, int(self.constellation)))
        if clamped != self.constellation:
            object.__setattr__(self, "constellation", clamped)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "level": self.level,
            "constellation": self.constellation,
            "element": self.element.value,
            "imageUrl": self.image_url,
            "talents": self.talents.to_dict(),
        }
        if self.constellation_icons is not None:
            data["constellationIcons"] = list(self.constellation_icons)
        return data


@dataclass(frozen=True)
class Weapon:
    """Equipped weapon."""
    name: str = ""
    level: int = 1
    refinement: int = 1
    image_url: str = ""
    main_stat: Optional[StatEntry] = None
    sub_stat: Optional[StatEntry] = None
    rarity: Optional[int] = None

    def __post_init__(self) -> None:
        clamped = max(MIN_REFINEMENT, min(MAX_REFINEMENT, int(self.refinement)))
        if clamped != self.refinement:
            object.__setattr__(self, "refinement", clamped)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "level": self.level,
            "refinement": self.refinement,
            "imageUrl": self.image_url,
        }
        if self.main_stat is not None:
            data["mainStat"] = self.main_stat.to_dict()
        if self.sub_stat is not None:
            data["subStat"] = self.sub_stat.to_dict()
        if self.rarity is not None:
            data["rarity"] = self.rarity
        return data


@dataclass(frozen=True)
class Artifact:
    """One equipped artifact piece."""
    slot: ArtifactSlot
    set: str = ""
    main_stat: StatEntry = field(default_factory=lambda: StatEntry("Main", "0"))
    sub_stats: Tuple[StatEntry, ...] = ()
    level: int = 0
    image_url: Optional[str] = None
    rarity: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "slot": self.slot.value,
            "set": self.set,
            "level": self.level,
            "mainStat": self.main_stat.to_dict(),
            "subStats": [s.to_dict() for s in self.sub_stats],
        }
        if self.image_url is not None:
            data["imageUrl"] = self.image_url
        if self.rarity is not None:
            data["rarity"] = self.rarity
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], slot: Optional[ArtifactSlot] = None) -> "Artifact":
        """Build an Artifact from its JSON form; missing fields take defaults."""
        resolved = slot or ArtifactSlot.from_string(data.get("slot", ""))
        if resolved is None:
            raise ValueError(f"Unknown artifact slot: {data.get('slot')!r}")
        main = data.get("mainStat")
        return cls(
            slot=resolved,
            set=str(data.get("set", "")),
            main_stat=StatEntry.from_dict(main) if isinstance(main, Mapping) else StatEntry("Main", "0"),
            sub_stats=tuple(StatEntry.from_dict(s) for s in data.get("subStats") or [] if isinstance(s, Mapping)),
            level=_int_or(data.get("level"), 0),
            image_url=data.get("imageUrl"),
            rarity=data.get("rarity"),
        )


class ArtifactSlots:
    """
    Fixed-size mapping from ArtifactSlot to Artifact.

    Always holds exactly one artifact per slot and iterates in slot order.
    Instances are immutable; with_artifact() returns a new container.
    """

    __slots__ = ("_items",)

    def __init__(self, artifacts: Mapping[ArtifactSlot, Artifact] | Iterable[Artifact]):
        if isinstance(artifacts, Mapping):
            items = dict(artifacts)
        else:
            items = {}
            for artifact in artifacts:
                if artifact.slot in items:
                    raise ValueError(f"Duplicate artifact slot: {artifact.slot.value}")
                items[artifact.slot] = artifact

        missing = [slot.value for slot in ArtifactSlot if slot not in items]
        if missing:
            raise ValueError(f"Missing artifact slots: {', '.join(missing)}")
        extra = [key for key in items if not isinstance(key, ArtifactSlot)]
        if extra:
            raise ValueError(f"Unknown artifact slots: {extra}")
        for slot, artifact in items.items():
            if artifact.slot is not slot:
                raise ValueError(
                    f"Artifact for slot {artifact.slot.value} stored under {slot.value}"
                )
        self._items: Dict[ArtifactSlot, Artifact] = {slot: items[slot] for slot in ArtifactSlot}

    def __getitem__(self, slot: ArtifactSlot) -> Artifact:
        return self._items[slot]

    def __iter__(self) -> Iterator[Artifact]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ArtifactSlots):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(tuple(self._items.values()))

    def __repr__(self) -> str:
        return f"ArtifactSlots({list(self._items.values())!r})"

    def items(self) -> Iterator[Tuple[ArtifactSlot, Artifact]]:
        return iter(self._items.items())

    def with_artifact(self, artifact: Artifact) -> "ArtifactSlots":
        """Return a copy with the artifact's slot replaced."""
        items = dict(self._items)
        items[artifact.slot] = artifact
        return ArtifactSlots(items)

    def to_list(self) -> List[Dict[str, Any]]:
        return [artifact.to_dict() for artifact in self]


@dataclass(frozen=True)
class Stats:
    """Derived character totals. Percent fields hold 33.1 for 33.1%."""
    hp: int = 0
    atk: int = 0
    def_: int = 0
    em: int = 0
    cr: float = 0.0
    cd: float = 0.0
    er: float = 0.0
    dmg_bonus: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hp": self.hp,
            "atk": self.atk,
            "def": self.def_,
            "em": self.em,
            "cr": self.cr,
            "cd": self.cd,
            "er": self.er,
            "dmgBonus": self.dmg_bonus,
        }


@dataclass(frozen=True)
class BuildData:
    """A complete build card: character, weapon, five artifacts and totals."""
    character: Character
    weapon: Weapon
    artifacts: ArtifactSlots
    stats: Stats
    score_base: Optional[ScoreBase] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible representation using the card's camelCase keys."""
        data: Dict[str, Any] = {
            "character": self.character.to_dict(),
            "weapon": self.weapon.to_dict(),
            "artifacts": self.artifacts.to_list(),
            "stats": self.stats.to_dict(),
        }
        if self.score_base is not None:
            data["scoreBase"] = self.score_base.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BuildData":
        """
        Rebuild a BuildData from to_dict() output.

        Missing sections and fields fall back to the default skeleton; artifact
        entries are matched by their slot, so order does not matter.
        """
        base = default_build()

        char = data.get("character") or {}
        talents = char.get("talents") or {}
        icons = char.get("constellationIcons")
        character = Character(
            name=str(char.get("name", base.character.name)),
            level=_int_or(char.get("level"), base.character.level),
            constellation=_int_or(char.get("constellation"), base.character.constellation),
            element=Element.from_string(char.get("element"), base.character.element),
            image_url=str(char.get("imageUrl", "") or ""),
            talents=Talents(
                normal=_talent_from(talents.get("normal")),
                skill=_talent_from(talents.get("skill")),
                burst=_talent_from(talents.get("burst")),
            ),
            constellation_icons=tuple(icons) if isinstance(icons, list) else None,
        )

        wpn = data.get("weapon") or {}
        weapon = Weapon(
            name=str(wpn.get("name", base.weapon.name)),
            level=_int_or(wpn.get("level"), base.weapon.level),
            refinement=_int_or(wpn.get("refinement"), base.weapon.refinement),
            image_url=str(wpn.get("imageUrl", "") or ""),
            main_stat=StatEntry.from_dict(wpn["mainStat"]) if isinstance(wpn.get("mainStat"), Mapping) else None,
            sub_stat=StatEntry.from_dict(wpn["subStat"]) if isinstance(wpn.get("subStat"), Mapping) else None,
            rarity=wpn.get("rarity"),
        )

        artifacts = base.artifacts
        for entry in data.get("artifacts") or []:
            if not isinstance(entry, Mapping):
                continue
            slot = ArtifactSlot.from_string(entry.get("slot", ""))
            if slot is None:
                continue
            artifacts = artifacts.with_artifact(Artifact.from_dict(entry, slot=slot))

        st = data.get("stats") or {}
        stats = Stats(
            hp=_int_or(st.get("hp"), 0),
            atk=_int_or(st.get("atk"), 0),
            def_=_int_or(st.get("def"), 0),
            em=_int_or(st.get("em"), 0),
            cr=_float_or(st.get("cr"), 0.0),
            cd=_float_or(st.get("cd"), 0.0),
            er=_float_or(st.get("er"), 0.0),
            dmg_bonus=_float_or(st.get("dmgBonus"), 0.0),
        )

        return cls(
            character=character,
            weapon=weapon,
            artifacts=artifacts,
            stats=stats,
            score_base=ScoreBase.from_string(data["scoreBase"]) if data.get("scoreBase") else None,
        )


def default_artifacts() -> ArtifactSlots:
    """Five empty artifact slots."""
    return ArtifactSlots([
        Artifact(slot=ArtifactSlot.FLOWER, main_stat=StatEntry("HP", "0")),
        Artifact(slot=ArtifactSlot.PLUME, main_stat=StatEntry("ATK", "0")),
        Artifact(slot=ArtifactSlot.SANDS),
        Artifact(slot=ArtifactSlot.GOBLET),
        Artifact(slot=ArtifactSlot.CIRCLET),
    ])


def default_build() -> BuildData:
    """Return a fresh default build skeleton."""
    return BuildData(
        character=Character(),
        weapon=Weapon(),
        artifacts=default_artifacts(),
        stats=Stats(),
    )


def _talent_from(data: Any) -> Talent:
    if not isinstance(data, Mapping):
        return Talent()
    return Talent(
        level=_int_or(data.get("level"), 1),
        boosted=bool(data.get("boosted", False)),
        icon=str(data.get("icon", "") or ""),
    )


_INT_PREFIX = re.compile(r"^\s*[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def parse_int(value: Any) -> Optional[int]:
    """
    Read the leading integer of a value: "90", "90.0" and "90lv" all give 90.

    Returns None when the input has no leading integer.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _INT_PREFIX.match(str(value))
    return int(match.group()) if match else None


def parse_float(value: Any) -> Optional[float]:
    """Read the leading decimal number of a value ("187.4%" gives 187.4)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    match = _FLOAT_PREFIX.match(str(value))
    return float(match.group()) if match else None


def _int_or(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _float_or(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default
