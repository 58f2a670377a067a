"""
Artifact Scoring.

Scores artifacts from their crit substats plus the percent substat of the
build's score base, and maps scores to rank labels:

    score = crit_rate * 2 + crit_dmg + base_stat_percent

Ranks use inclusive lower bounds:

    Slot             SS    S     A
    Flower / Plume   50    45    40
    Other slots      45    40    30
    Build total      220   200   180

Scoring never raises; values that cannot be read as a non-negative finite
number contribute nothing.
"""
from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from core.build_models import Artifact, ArtifactSlot, BuildData, ScoreBase, StatEntry
from core.constants import (
    BASE_STAT_WEIGHT,
    CRIT_DAMAGE_WEIGHT,
    CRIT_RATE_WEIGHT,
    LABEL_CRIT_DAMAGE,
    LABEL_CRIT_RATE,
    RANK_COLORS,
    RANK_THRESHOLDS_FLOWER_PLUME,
    RANK_THRESHOLDS_OTHER_SLOTS,
    RANK_THRESHOLDS_TOTAL,
    STAT_LABELS,
)

logger = logging.getLogger(__name__)

# Substat label that scores for each score base
BASE_STAT_LABELS: Dict[ScoreBase, str] = {
    ScoreBase.ATK: STAT_LABELS["FIGHT_PROP_ATTACK_PERCENT"],
    ScoreBase.HP: STAT_LABELS["FIGHT_PROP_HP_PERCENT"],
    ScoreBase.DEF: STAT_LABELS["FIGHT_PROP_DEFENSE_PERCENT"],
    ScoreBase.ER: STAT_LABELS["FIGHT_PROP_CHARGE_EFFICIENCY"],
}

DEFAULT_SCORE_BASE = ScoreBase.ATK

RANK_LABELS = ("SS", "S", "A")
LOWEST_RANK = "B"

BaseStatLike = Union[ScoreBase, str, None]


@dataclass(frozen=True)
class Rank:
    """Rank label and its display color."""
    label: str
    color: str

    @classmethod
    def of(cls, label: str) -> "Rank":
        return cls(label=label, color=RANK_COLORS[label])

    def to_dict(self) -> Dict[str, str]:
        return {"label": self.label, "color": self.color}


@dataclass(frozen=True)
class ArtifactScore:
    """Score and rank of one artifact slot."""
    slot: ArtifactSlot
    score: float
    rank: Rank

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slot": self.slot.value,
            "slotName": self.slot.display_name,
            "score": self.score,
            "rank": self.rank.to_dict(),
        }


@dataclass(frozen=True)
class BuildScoreReport:
    """Per-slot scores plus the build total."""
    score_base: ScoreBase
    artifacts: Tuple[ArtifactScore, ...]
    total_score: float
    total_rank: Rank
    set_bonuses: Tuple[Tuple[str, int], ...] = ()

    @property
    def score_base_label(self) -> str:
        return self.score_base.display_name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scoreBase": self.score_base.value,
            "scoreBaseLabel": self.score_base_label,
            "artifacts": [a.to_dict() for a in self.artifacts],
            "totalScore": self.total_score,
            "totalRank": self.total_rank.to_dict(),
            "setBonuses": [{"set": name, "count": count} for name, count in self.set_bonuses],
        }


# =============================================================================
# Scores
# =============================================================================


def resolve_score_base(base_stat: BaseStatLike) -> ScoreBase:
    """Parse a score base; anything unrecognized falls back to atk."""
    if base_stat is None:
        return DEFAULT_SCORE_BASE
    resolved = ScoreBase.from_string(base_stat)
    if resolved is None:
        logger.warning(f"Unknown score base {base_stat!r}, using {DEFAULT_SCORE_BASE.value}")
        return DEFAULT_SCORE_BASE
    return resolved


def substat_weight(label: str, base_stat: BaseStatLike = DEFAULT_SCORE_BASE) -> float:
    """Multiplier a substat label carries under the given score base (0 if none)."""
    if label == LABEL_CRIT_RATE:
        return CRIT_RATE_WEIGHT
    if label == LABEL_CRIT_DAMAGE:
        return CRIT_DAMAGE_WEIGHT
    if label == BASE_STAT_LABELS[resolve_score_base(base_stat)]:
        return BASE_STAT_WEIGHT
    return 0.0


def is_scoring_substat(entry: StatEntry, base_stat: BaseStatLike = DEFAULT_SCORE_BASE) -> bool:
    """Whether a substat contributes to the artifact score."""
    return substat_weight(entry.label, base_stat) > 0


def artifact_score(artifact: Artifact, base_stat: BaseStatLike = DEFAULT_SCORE_BASE) -> float:
    """
    Score one artifact from its substats.

    Args:
        artifact: Artifact whose sub_stats hold display values ("10.5%")
        base_stat: Score base; unknown values fall back to atk

    Returns:
        Non-negative score rounded to one decimal
    """
    base = resolve_score_base(base_stat)
    score = 0.0
    for sub in artifact.sub_stats:
        weight = substat_weight(sub.label, base)
        if not weight:
            continue
        value = parse_stat_value(sub.value)
        if value is None:
            logger.debug(f"Ignoring unreadable {sub.label} value {sub.value!r} on {artifact.slot.value}")
            continue
        score += value * weight
    return round(score, 1)


def total_score(artifacts: Iterable[Artifact], base_stat: BaseStatLike = DEFAULT_SCORE_BASE) -> float:
    """Sum of the individual artifact scores, rounded to one decimal."""
    base = resolve_score_base(base_stat)
    return round(sum(artifact_score(a, base) for a in artifacts), 1)


def parse_stat_value(value: Any) -> Optional[float]:
    """
    Read a display value such as "10.5%" or "15.0".

    Returns None for anything that is not a finite, non-negative number.
    """
    if isinstance(value, bool):
        return None
    text = str(value).strip().rstrip("%").strip()
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


# =============================================================================
# Ranks
# =============================================================================


def _rank_for(score: float, thresholds: Tuple[float, float, float]) -> Rank:
    for label, threshold in zip(RANK_LABELS, thresholds):
        if score >= threshold:
            return Rank.of(label)
    return Rank.of(LOWEST_RANK)


def artifact_rank(score: float, slot: Union[ArtifactSlot, str]) -> Rank:
    """Rank one artifact's score; slot may be an ArtifactSlot, value or display name."""
    resolved = ArtifactSlot.from_string(slot)
    if resolved in (ArtifactSlot.FLOWER, ArtifactSlot.PLUME):
        return _rank_for(score, RANK_THRESHOLDS_FLOWER_PLUME)
    return _rank_for(score, RANK_THRESHOLDS_OTHER_SLOTS)


def total_rank(total: float) -> Rank:
    """Rank a build's total artifact score."""
    return _rank_for(total, RANK_THRESHOLDS_TOTAL)


# =============================================================================
# Build-level helpers
# =============================================================================


def score_build(build: BuildData, base_stat: BaseStatLike = None) -> BuildScoreReport:
    """
    Score every artifact of a build.

    Uses ``base_stat`` when given, else the build's score base, else atk.
    """
    base = resolve_score_base(base_stat if base_stat is not None else build.score_base)

    scores = []
    for slot, artifact in build.artifacts.items():
        score = artifact_score(artifact, base)
        scores.append(ArtifactScore(slot=slot, score=score, rank=artifact_rank(score, slot)))

    total = round(sum(s.score for s in scores), 1)
    return BuildScoreReport(
        score_base=base,
        artifacts=tuple(scores),
        total_score=total,
        total_rank=total_rank(total),
        set_bonuses=tuple(active_set_bonuses(build.artifacts)),
    )


def active_set_bonuses(artifacts: Iterable[Artifact]) -> List[Tuple[str, int]]:
    """
    Artifact sets with two or more pieces equipped.

    Returns:
        (set label, piece count) pairs, highest count first; ties keep the
        order in which the set first appears.
    """
    counts = Counter(a.set for a in artifacts if a.set)
    active = [(name, count) for name, count in counts.items() if count >= 2]
    return sorted(active, key=lambda item: item[1], reverse=True)
