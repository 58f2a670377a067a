"""
Configuration management for the Genshin Build Card.
Handles user settings, API client tuning, and persistence.
"""

import json
import logging
import copy
from pathlib import Path
from typing import Optional, Dict, Any

from core.build_models import ScoreBase
from core.constants import (
    API_TIMEOUT_DEFAULT,
    API_TIMEOUT_ENKA_READ,
    CACHE_TTL_SNAPSHOT,
    ENKA_API_BASE_URL,
    ENKA_UI_BASE_URL,
    ENKA_USER_AGENT,
    RATE_LIMIT_ENKA,
)

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_GAME_DATA_PATH = PROJECT_ROOT / "data" / "gameData.json"


def get_config_dir() -> Path:
    """
    Get the application config directory.

    Returns:
        Path to the config directory (~/.genshin_build_card/)
    """
    config_dir = Path.home() / ".genshin_build_card"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


class Config:
    """
    Application configuration with JSON persistence.

    Key ideas:
    - Defaults live in DEFAULT_CONFIG; the user file only needs the keys it
      overrides, and new default keys appear without a migration.
    - Property accessors apply guardrails so a hand-edited file cannot push
      the Enka client past its rate limit.
    """

    # NOTE: This structure is treated as immutable. Always use
    # _default_config_deepcopy() when you need a fresh copy of defaults.
    DEFAULT_CONFIG: Dict[str, Any] = {
        "scoring": {
            # Stat family whose percent substat scores: atk, hp, def, er
            "score_base": ScoreBase.ATK.value,
        },
        "api": {
            "enka_base_url": ENKA_API_BASE_URL,
            "user_agent": ENKA_USER_AGENT,
            # GUARDRAIL: Min 0.1 (1 req/10s), Max 2.0
            "rate_limit_per_second": RATE_LIMIT_ENKA,
            # Used when a snapshot carries no ttl of its own
            "cache_ttl_seconds": CACHE_TTL_SNAPSHOT,
            # Explicit timeouts (seconds). Requests supports tuple (connect, read)
            # but we store them separately for clarity and compose as needed.
            "timeouts": {
                "connect": API_TIMEOUT_DEFAULT,
                "read": API_TIMEOUT_ENKA_READ,
            },
        },
        "data": {
            # Empty = data/gameData.json beside the project
            "game_data_path": "",
        },
        "assets": {
            "ui_base_url": ENKA_UI_BASE_URL,
        },
    }

    def __init__(self, config_file: Optional[Path] = None) -> None:
        """
        Initialize configuration.

        Args:
            config_file: Optional path to config JSON file. When omitted,
                         the default path under ~/.genshin_build_card/config.json
                         is used.
        """
        self.config_file: Path = self._resolve_config_path(config_file)
        self.config_file.parent.mkdir(parents=True, exist_ok=True)

        self.data: Dict[str, Any] = self._load()
        logger.info(f"Config loaded from {self.config_file}")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_config_path(config_file: Optional[Path]) -> Path:
        if config_file is not None:
            return Path(config_file)
        return Path.home() / ".genshin_build_card" / "config.json"

    def _load(self) -> Dict[str, Any]:
        """Load configuration from JSON file, merging with defaults."""
        if not self.config_file.exists():
            logger.info("No config file found, using defaults")
            return self._default_config_deepcopy()

        try:
            with self.config_file.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error(f"Failed to load config: {exc}. Using defaults.")
            return self._default_config_deepcopy()

        if not isinstance(raw, dict):
            logger.error("Config file is not a JSON object. Using defaults.")
            return self._default_config_deepcopy()

        return self._merge_with_defaults(raw)

    @classmethod
    def _default_config_deepcopy(cls) -> Dict[str, Any]:
        """
        Return a deep copy of the DEFAULT_CONFIG to avoid state leakage
        between instances or tests.
        """
        return copy.deepcopy(cls.DEFAULT_CONFIG)

    def _merge_with_defaults(self, user_config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge user config with defaults to handle new keys.

        Top-level sections are merged key by key so new keys under e.g.
        "api" appear without discarding user-provided values.
        """
        merged = self._default_config_deepcopy()

        for key, value in user_config.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key].update(value)
            else:
                merged[key] = value

        return merged

    def _section(self, name: str) -> Dict[str, Any]:
        section = self.data.get(name)
        if not isinstance(section, dict):
            section = copy.deepcopy(self.DEFAULT_CONFIG.get(name, {}))
            self.data[name] = section
        return section

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self) -> None:
        """Persist the current configuration to the config file."""
        try:
            with self.config_file.open("w", encoding="utf-8") as f:
                json.dump(self.data, f, indent=2, ensure_ascii=False)
            logger.info("Configuration saved")
        except OSError as exc:
            logger.error(f"Failed to save config: {exc}")

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    @property
    def score_base(self) -> ScoreBase:
        """Default score base for new builds; unknown values read as atk."""
        value = self._section("scoring").get("score_base", ScoreBase.ATK.value)
        return ScoreBase.from_string(value) or ScoreBase.ATK

    @score_base.setter
    def score_base(self, value: "ScoreBase | str") -> None:
        resolved = ScoreBase.from_string(value)
        if resolved is None:
            raise ValueError(f"Unknown score base: {value!r}")
        self._section("scoring")["score_base"] = resolved.value
        self.save()

    # ------------------------------------------------------------------
    # Enka.Network API
    # ------------------------------------------------------------------

    @property
    def enka_base_url(self) -> str:
        return str(self._section("api").get("enka_base_url") or ENKA_API_BASE_URL).rstrip("/")

    @enka_base_url.setter
    def enka_base_url(self, value: str) -> None:
        self._section("api")["enka_base_url"] = str(value).rstrip("/")
        self.save()

    @property
    def user_agent(self) -> str:
        """User-Agent sent to Enka.Network, which asks clients to identify themselves."""
        return str(self._section("api").get("user_agent") or ENKA_USER_AGENT)

    @property
    def api_rate_limit(self) -> float:
        """
        API rate limit in requests per second.

        Guardrails: Min 0.1 (1 req/10s), Max 2.0.
        """
        try:
            value = float(self._section("api").get("rate_limit_per_second", RATE_LIMIT_ENKA))
        except (TypeError, ValueError):
            return RATE_LIMIT_ENKA
        return max(0.1, min(2.0, value))

    @api_rate_limit.setter
    def api_rate_limit(self, value: float) -> None:
        """Set API rate limit; values outside 0.1-2.0 are clamped."""
        self._section("api")["rate_limit_per_second"] = max(0.1, min(2.0, float(value)))
        self.save()

    @property
    def cache_ttl_seconds(self) -> int:
        """Snapshot cache TTL used when a response has no ttl (10s .. 1 day)."""
        try:
            value = int(self._section("api").get("cache_ttl_seconds", CACHE_TTL_SNAPSHOT))
        except (TypeError, ValueError):
            return CACHE_TTL_SNAPSHOT
        return max(10, min(86400, value))

    def get_api_timeouts(self) -> tuple[int, int]:
        """
        Return (connect, read) timeouts in seconds for API calls.
        """
        t = self._section("api").get("timeouts", {}) or {}
        try:
            connect = int(t.get("connect", API_TIMEOUT_DEFAULT))
            read = int(t.get("read", API_TIMEOUT_ENKA_READ))
        except (TypeError, ValueError):
            return API_TIMEOUT_DEFAULT, API_TIMEOUT_ENKA_READ
        # Guardrails
        connect = max(1, min(120, connect))
        read = max(1, min(300, read))
        return connect, read

    def set_api_timeouts(self, connect: int | float, read: int | float) -> None:
        """
        Set API timeouts (seconds). Guardrails applied: connect [1..120], read [1..300].
        """
        timeouts = self._section("api").setdefault("timeouts", {})
        timeouts["connect"] = int(max(1, min(120, int(connect))))
        timeouts["read"] = int(max(1, min(300, int(read))))
        self.save()

    # ------------------------------------------------------------------
    # Data and assets
    # ------------------------------------------------------------------

    @property
    def game_data_path(self) -> Path:
        """Location of the static game database (gameData.json)."""
        value = self._section("data").get("game_data_path") or ""
        return Path(value).expanduser() if value else DEFAULT_GAME_DATA_PATH

    @property
    def ui_base_url(self) -> str:
        """Base URL for icon and splash art assets."""
        return str(self._section("assets").get("ui_base_url") or ENKA_UI_BASE_URL).rstrip("/")

    # ------------------------------------------------------------------
    # Utility
    # ------------------------------------------------------------------

    def reset_to_defaults(self) -> None:
        """Reset all settings to defaults and persist."""
        self.data = self._default_config_deepcopy()
        self.save()
        logger.warning("Configuration reset to defaults")

    def __repr__(self) -> str:
        return f"Config(score_base={self.score_base.value}, enka={self.enka_base_url})"
