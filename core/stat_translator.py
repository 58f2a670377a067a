"""
Stat Code Translator.

Maps internal fight-property codes (e.g. FIGHT_PROP_CRITICAL) to display
labels and formats raw values for display.

Two value conventions reach this module:
- fightPropMap values are ratios (0.331 == 33.1%) and are scaled by 100
- equipment ``flat`` stat values are already in display units (10.5 == 10.5%)
  and are passed with ``ratio=False``
"""
from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional

from core.build_models import StatEntry
from core.constants import (
    DAMAGE_BONUS_MARKER,
    PERCENT_STAT_CODES,
    PERCENT_SUFFIX,
    STAT_LABELS,
)

logger = logging.getLogger(__name__)


class StatCodeTranslator:
    """Translates stat codes to labels and formats stat values."""

    def __init__(self, labels: Optional[Mapping[str, str]] = None):
        self._labels: dict[str, str] = dict(STAT_LABELS if labels is None else labels)

    def label_of(self, code: str) -> str:
        """Display label for a stat code, or the code itself when unmapped."""
        return self._labels.get(code, str(code))

    @staticmethod
    def is_percent(code: str) -> bool:
        """True when the stat is displayed as a percentage."""
        code = str(code)
        return (
            code.endswith(PERCENT_SUFFIX)
            or code in PERCENT_STAT_CODES
            or DAMAGE_BONUS_MARKER in code
        )

    def format(self, code: str, raw_value: Any, ratio: bool = True) -> str:
        """
        Format a stat value for display.

        Args:
            code: Stat code (FIGHT_PROP_*)
            raw_value: Numeric value; ratio form for percent stats unless
                ``ratio`` is False
            ratio: Whether percent values are ratios that need scaling by 100

        Returns:
            "33.1%" for percent stats, "4781" for flat stats
        """
        value = _to_float(raw_value)
        if value is None:
            logger.warning(f"Non-numeric value {raw_value!r} for stat {code}, using 0")
            value = 0.0

        if self.is_percent(code):
            if ratio:
                value *= 100
            return f"{value:.1f}%"
        return str(_round_half_up(value))

    def to_entry(self, code: str, raw_value: Any, ratio: bool = True) -> StatEntry:
        """Build a display-ready StatEntry for a stat code and value."""
        return StatEntry(label=self.label_of(code), value=self.format(code, raw_value, ratio=ratio))


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _round_half_up(value: float) -> int:
    # Matches Math.round: halves round toward +infinity
    return int(math.floor(value + 0.5))


# Shared default instance; the translator holds no mutable state
default_translator = StatCodeTranslator()
