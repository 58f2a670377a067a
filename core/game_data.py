"""
Game Data - static reference database for characters, weapons and artifacts.

The database file is generated offline from the game's data dumps and has the
shape::

    {
        "characters": {"10000089": {"name": ..., "icon": ..., "skills": {...}}},
        "weapons": {"11509": {"name": ..., "icon": ...}},
        "artifacts": {"81424": {"name": ..., "icon": ..., "setId": 15031}},
        "artifactSets": {"15031": "..."}
    }

It is validated once at load time; lookups afterwards are plain dictionary
reads where a missing id is an ordinary outcome (None).
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

RecordId = Union[int, str]


class GameDataError(Exception):
    """Raised when the game database file is missing or malformed."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        super().__init__(f"{message} ({path})" if path else message)


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class SkillRecord(_Record):
    """One talent's skill id, icon name and proud-skill group."""
    id: int
    icon: Optional[str] = None
    proud_skill_group_id: Optional[int] = Field(default=None, alias="proudSkillGroupId")


class CharacterSkills(_Record):
    normal: Optional[SkillRecord] = None
    skill: Optional[SkillRecord] = None
    burst: Optional[SkillRecord] = None


class CharacterRecord(_Record):
    name: str
    icon: str = ""
    side_icon: Optional[str] = Field(default=None, alias="sideIcon")
    element: Optional[str] = None
    weapon_type: Optional[str] = Field(default=None, alias="weaponType")
    skills: Optional[CharacterSkills] = None
    constellations: Optional[List[str]] = None


class WeaponRecord(_Record):
    name: str
    icon: str = ""
    weapon_type: Optional[str] = Field(default=None, alias="weaponType")
    rarity: Optional[int] = Field(default=None, ge=1, le=5)


class ArtifactRecord(_Record):
    name: str
    icon: str = ""
    set_id: Optional[int] = Field(default=None, alias="setId")


class GameDataFile(_Record):
    """Top-level schema of the game database file."""
    characters: Dict[str, CharacterRecord] = Field(default_factory=dict)
    weapons: Dict[str, WeaponRecord] = Field(default_factory=dict)
    artifacts: Dict[str, ArtifactRecord] = Field(default_factory=dict)
    artifact_sets: Dict[str, str] = Field(default_factory=dict, alias="artifactSets")


class GameDatabase:
    """
    Read-only lookup from numeric ids to display records.

    Ids may be passed as int or str; they are matched on their string form
    because the file is keyed by JSON object keys.
    """

    def __init__(self, data: Optional[GameDataFile] = None):
        self._data = data or GameDataFile()

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GameDatabase":
        """Validate a decoded game database payload."""
        try:
            data = GameDataFile.model_validate(payload)
        except ValidationError as e:
            raise GameDataError(f"Invalid game database: {e.error_count()} validation error(s)\n{e}") from e
        return cls(data)

    @classmethod
    def from_file(cls, path: Path) -> "GameDatabase":
        """Load and validate a game database JSON file."""
        path = Path(path)
        if not path.exists():
            raise GameDataError("Game database not found", path)
        try:
            with path.open("r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise GameDataError(f"Could not read game database: {e}", path) from e
        if not isinstance(payload, dict):
            raise GameDataError("Game database must be a JSON object", path)

        db = cls.from_dict(payload)
        logger.info(f"Game database loaded from {path}: {db.counts()}")
        return db

    @classmethod
    def empty(cls) -> "GameDatabase":
        """A database in which every lookup misses."""
        return cls()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_character(self, character_id: RecordId) -> Optional[CharacterRecord]:
        return self._data.characters.get(str(character_id))

    def get_weapon(self, weapon_id: RecordId) -> Optional[WeaponRecord]:
        return self._data.weapons.get(str(weapon_id))

    def get_artifact_piece(self, piece_id: RecordId) -> Optional[ArtifactRecord]:
        return self._data.artifacts.get(str(piece_id))

    def get_set_name(self, set_id: RecordId) -> Optional[str]:
        return self._data.artifact_sets.get(str(set_id))

    def counts(self) -> Dict[str, int]:
        """Number of records per table."""
        return {
            "characters": len(self._data.characters),
            "weapons": len(self._data.weapons),
            "artifacts": len(self._data.artifacts),
            "artifactSets": len(self._data.artifact_sets),
        }


def load_game_database(path: Optional[Path]) -> GameDatabase:
    """
    Load the game database for an application run.

    A missing file is tolerated (every lookup then misses and builds show
    "Unknown" names); a malformed file raises GameDataError.
    """
    if path is None or not Path(path).exists():
        logger.warning(f"Game database not found at {path}; names and icons will be unresolved")
        return GameDatabase.empty()
    return GameDatabase.from_file(path)
