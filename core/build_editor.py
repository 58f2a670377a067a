"""
Build Editor - field-level edits on a BuildData.

Each function returns a new build; the input is never modified. Numeric
fields accept form input strings and read them the way a browser number
field does: the leading number is used ("90" and "90lv" both give 90) and
input without one leaves the field unchanged.
"""
from __future__ import annotations

import logging
from dataclasses import fields, replace
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Set, Union

from core.build_models import (
    Artifact,
    ArtifactSlot,
    BuildData,
    Element,
    ScoreBase,
    StatEntry,
    default_build,
    parse_float,
    parse_int,
)
from core.constants import (
    MAX_CONSTELLATION,
    MAX_REFINEMENT,
    MAX_SUBSTATS,
    MIN_REFINEMENT,
)

logger = logging.getLogger(__name__)

# JSON-style names accepted alongside the dataclass field names
_FIELD_ALIASES = {
    "imageUrl": "image_url",
    "mainStat": "main_stat",
    "subStat": "sub_stat",
    "subStats": "sub_stats",
    "def": "def_",
    "dmgBonus": "dmg_bonus",
}

_CHARACTER_INT_FIELDS = {"level", "constellation"}
_WEAPON_INT_FIELDS = {"level", "refinement", "rarity"}
_STATS_INT_FIELDS = {"hp", "atk", "def_", "em"}
_STATS_FLOAT_FIELDS = {"cr", "cd", "er", "dmg_bonus"}
_ARTIFACT_INT_FIELDS = {"level", "rarity"}


class BuildEditError(ValueError):
    """Raised for edits that name an unknown field, slot or substat."""


# =============================================================================
# Character / weapon / stats
# =============================================================================


def update_character(build: BuildData, **changes: Any) -> BuildData:
    """Edit character fields (name, level, constellation, element, ...)."""
    changes = _resolve_fields(type(build.character), changes, exclude={"talents"})
    changes = _coerce(build.character, changes, _CHARACTER_INT_FIELDS, parse_int)

    if "constellation" in changes:
        changes["constellation"] = _clamp(changes["constellation"], 0, MAX_CONSTELLATION)
    if "element" in changes:
        element = Element.from_string(changes["element"])
        if element is None:
            raise BuildEditError(f"Unknown element: {changes['element']!r}")
        changes["element"] = element

    return replace(build, character=replace(build.character, **changes))


def update_weapon(build: BuildData, **changes: Any) -> BuildData:
    """Edit weapon fields (name, level, refinement, ...)."""
    changes = _resolve_fields(type(build.weapon), changes)
    changes = _coerce(build.weapon, changes, _WEAPON_INT_FIELDS, parse_int)

    if "refinement" in changes:
        changes["refinement"] = _clamp(changes["refinement"], MIN_REFINEMENT, MAX_REFINEMENT)
    for key in ("main_stat", "sub_stat"):
        if key in changes and changes[key] is not None:
            changes[key] = _stat_entry(changes[key])

    return replace(build, weapon=replace(build.weapon, **changes))


def update_stats(build: BuildData, **changes: Any) -> BuildData:
    """Edit derived stat totals; percent fields take display values (33.1)."""
    changes = _resolve_fields(type(build.stats), changes)
    changes = _coerce(build.stats, changes, _STATS_INT_FIELDS, parse_int)
    changes = _coerce(build.stats, changes, _STATS_FLOAT_FIELDS, parse_float)
    return replace(build, stats=replace(build.stats, **changes))


# =============================================================================
# Artifacts
# =============================================================================


def update_artifact(build: BuildData, slot: Union[ArtifactSlot, str], **changes: Any) -> BuildData:
    """Edit one artifact slot (set, level, main_stat, ...)."""
    resolved = _slot(slot)
    artifact = build.artifacts[resolved]

    changes = _resolve_fields(Artifact, changes, exclude={"slot"})
    changes = _coerce(artifact, changes, _ARTIFACT_INT_FIELDS, parse_int)

    if "main_stat" in changes:
        changes["main_stat"] = _stat_entry(changes["main_stat"])
    if "sub_stats" in changes:
        if not isinstance(changes["sub_stats"], (list, tuple)):
            raise BuildEditError(f"Expected a list of substats, got {changes['sub_stats']!r}")
        sub_stats = tuple(_stat_entry(s) for s in changes["sub_stats"])
        if len(sub_stats) > MAX_SUBSTATS:
            raise BuildEditError(f"An artifact holds at most {MAX_SUBSTATS} substats, got {len(sub_stats)}")
        changes["sub_stats"] = sub_stats

    return _with_artifact(build, replace(artifact, **changes))


def update_substat(
    build: BuildData,
    slot: Union[ArtifactSlot, str],
    index: int,
    label: Optional[str] = None,
    value: Optional[str] = None,
) -> BuildData:
    """Change the label and/or value of one substat."""
    artifact = build.artifacts[_slot(slot)]
    if not 0 <= index < len(artifact.sub_stats):
        raise BuildEditError(f"No substat {index} on {artifact.slot.value} ({len(artifact.sub_stats)} present)")

    current = artifact.sub_stats[index]
    updated = StatEntry(
        label=current.label if label is None else str(label),
        value=current.value if value is None else str(value),
    )
    sub_stats = artifact.sub_stats[:index] + (updated,) + artifact.sub_stats[index + 1:]
    return _with_artifact(build, replace(artifact, sub_stats=sub_stats))


def add_substat(
    build: BuildData,
    slot: Union[ArtifactSlot, str],
    label: str = "",
    value: str = "",
) -> BuildData:
    """Append a substat; raises BuildEditError when the artifact is full."""
    artifact = build.artifacts[_slot(slot)]
    if len(artifact.sub_stats) >= MAX_SUBSTATS:
        raise BuildEditError(f"{artifact.slot.value} already has {MAX_SUBSTATS} substats")
    sub_stats = artifact.sub_stats + (StatEntry(label=str(label), value=str(value)),)
    return _with_artifact(build, replace(artifact, sub_stats=sub_stats))


def remove_substat(build: BuildData, slot: Union[ArtifactSlot, str], index: int) -> BuildData:
    artifact = build.artifacts[_slot(slot)]
    if not 0 <= index < len(artifact.sub_stats):
        raise BuildEditError(f"No substat {index} on {artifact.slot.value} ({len(artifact.sub_stats)} present)")
    sub_stats = artifact.sub_stats[:index] + artifact.sub_stats[index + 1:]
    return _with_artifact(build, replace(artifact, sub_stats=sub_stats))


# =============================================================================
# Whole build
# =============================================================================


def set_score_base(build: BuildData, base: Union[ScoreBase, str]) -> BuildData:
    resolved = ScoreBase.from_string(base)
    if resolved is None:
        valid = ", ".join(b.value for b in ScoreBase)
        raise BuildEditError(f"Unknown score base {base!r} (expected one of: {valid})")
    return replace(build, score_base=resolved)


def reset_build() -> BuildData:
    """Discard all edits and start from the empty skeleton."""
    return default_build()


# =============================================================================
# Edit documents
# =============================================================================

EDIT_OPS = (
    "character",
    "weapon",
    "stats",
    "artifact",
    "update_substat",
    "add_substat",
    "remove_substat",
    "score_base",
    "reset",
)


def apply_edit(build: BuildData, edit: Mapping[str, Any]) -> BuildData:
    """
    Apply one edit given as a mapping.

    An edit names its operation in "op" and carries the changed values in
    "fields". Artifact operations also need "slot", and the single-substat
    operations need "index":

        {"op": "weapon", "fields": {"refinement": 5}}
        {"op": "update_substat", "slot": "goblet", "index": 0, "fields": {"value": "7.0%"}}
        {"op": "score_base", "fields": {"scoreBase": "hp"}}
    """
    op = edit.get("op")
    changes = dict(edit.get("fields") or {})
    reserved = sorted(changes.keys() & {"build", "slot", "index"})
    if reserved:
        raise BuildEditError(f"{reserved[0]!r} is not an editable field")

    if op == "character":
        return update_character(build, **changes)
    if op == "weapon":
        return update_weapon(build, **changes)
    if op == "stats":
        return update_stats(build, **changes)
    if op == "artifact":
        return update_artifact(build, _required(edit, "slot", op), **changes)
    if op == "update_substat":
        return update_substat(
            build, _required(edit, "slot", op), _index(edit, op), **_substat_fields(changes)
        )
    if op == "add_substat":
        return add_substat(build, _required(edit, "slot", op), **_substat_fields(changes))
    if op == "remove_substat":
        return remove_substat(build, _required(edit, "slot", op), _index(edit, op))
    if op == "score_base":
        return set_score_base(build, changes.get("scoreBase", changes.get("score_base")))
    if op == "reset":
        return reset_build()

    raise BuildEditError(f"Unknown edit op {op!r} (expected one of: {', '.join(EDIT_OPS)})")


def apply_edits(build: BuildData, edits: Iterable[Mapping[str, Any]]) -> BuildData:
    """Apply edits in order; the first invalid one aborts the whole batch."""
    for position, edit in enumerate(edits):
        try:
            build = apply_edit(build, edit)
        except BuildEditError as e:
            raise BuildEditError(f"Edit {position} ({edit.get('op')}): {e}") from e
    return build


# =============================================================================
# Helpers
# =============================================================================


def _resolve_fields(model: type, changes: Dict[str, Any], exclude: Set[str] = frozenset()) -> Dict[str, Any]:
    allowed = {f.name for f in fields(model)} - set(exclude)
    resolved = {}
    for key, value in changes.items():
        name = _FIELD_ALIASES.get(key, key)
        if name not in allowed:
            raise BuildEditError(f"{model.__name__} has no editable field {key!r}")
        resolved[name] = value
    return resolved


def _coerce(
    target: Any,
    changes: Dict[str, Any],
    numeric_fields: Set[str],
    parse: Callable[[Any], Optional[Union[int, float]]],
) -> Dict[str, Any]:
    """Parse numeric inputs; unparsable ones are dropped so the field keeps its value."""
    result = dict(changes)
    for name in numeric_fields & changes.keys():
        parsed = parse(changes[name])
        if parsed is None:
            logger.warning(
                f"Ignoring non-numeric {type(target).__name__}.{name} input {changes[name]!r}; "
                f"keeping {getattr(target, name)!r}"
            )
            del result[name]
        else:
            result[name] = parsed
    return result


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _slot(slot: Union[ArtifactSlot, str]) -> ArtifactSlot:
    resolved = ArtifactSlot.from_string(slot)
    if resolved is None:
        raise BuildEditError(f"Unknown artifact slot: {slot!r}")
    return resolved


def _stat_entry(value: Any) -> StatEntry:
    if isinstance(value, StatEntry):
        return value
    if isinstance(value, dict):
        return StatEntry.from_dict(value)
    raise BuildEditError(f"Expected a stat entry, got {value!r}")


def _with_artifact(build: BuildData, artifact: Artifact) -> BuildData:
    return replace(build, artifacts=build.artifacts.with_artifact(artifact))


def _required(edit: Mapping[str, Any], key: str, op: Any) -> Any:
    if edit.get(key) is None:
        raise BuildEditError(f"Edit op {op!r} needs {key!r}")
    return edit[key]


def _index(edit: Mapping[str, Any], op: Any) -> int:
    index = _required(edit, "index", op)
    if isinstance(index, bool) or not isinstance(index, int):
        raise BuildEditError(f"Substat index must be an integer, got {index!r}")
    return index


def _substat_fields(changes: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(changes) - {"label", "value"}
    if unknown:
        raise BuildEditError(f"Substats have no editable field {sorted(unknown)[0]!r}")
    return changes
