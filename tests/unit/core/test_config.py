from __future__ import annotations

"""
Unit tests for core.config module (isolated per test)
"""

import pytest
import json
import uuid
from unittest.mock import patch

from core.build_models import ScoreBase
from core.config import Config, DEFAULT_GAME_DATA_PATH

pytestmark = pytest.mark.unit


# -------------------------
# Helper
# -------------------------

def get_unique_config_path(tmp_path):
    """Generate a unique config file path to prevent test interference"""
    return tmp_path / f"config_{uuid.uuid4().hex}.json"


# -------------------------
# Initialization Tests
# -------------------------

class TestConfigInitialization:
    def test_creates_config_file(self, tmp_path):
        config_file = get_unique_config_path(tmp_path)
        config = Config(config_file)
        config.save()

        assert config_file.exists()

    def test_loads_defaults_for_new_config(self, tmp_path):
        cfg = Config(get_unique_config_path(tmp_path))

        assert cfg.score_base is ScoreBase.ATK
        assert cfg.enka_base_url == "https://enka.network/api"
        assert cfg.api_rate_limit == 0.5
        assert cfg.cache_ttl_seconds == 60
        assert cfg.get_api_timeouts() == (10, 15)

    def test_creates_default_path_if_none(self, tmp_path):
        with patch("core.config.Path.home", return_value=tmp_path):
            cfg = Config()
        assert cfg.config_file == tmp_path / ".genshin_build_card" / "config.json"

    def test_loads_existing_config(self, tmp_path):
        config_file = get_unique_config_path(tmp_path)

        cfg1 = Config(config_file)
        cfg1.score_base = "hp"
        cfg1.api_rate_limit = 1.0

        cfg2 = Config(config_file)
        assert cfg2.score_base is ScoreBase.HP
        assert cfg2.api_rate_limit == 1.0

    def test_merges_with_defaults_on_load(self, tmp_path):
        config_file = get_unique_config_path(tmp_path)
        with open(config_file, "w") as f:
            json.dump({"api": {"user_agent": "Custom/2.0"}}, f)

        cfg = Config(config_file)

        assert cfg.user_agent == "Custom/2.0"
        assert cfg.api_rate_limit == 0.5
        assert cfg.score_base is ScoreBase.ATK

    def test_corrupted_file_uses_defaults(self, tmp_path):
        config_file = get_unique_config_path(tmp_path)
        config_file.write_text("{ not json", encoding="utf-8")

        cfg = Config(config_file)
        assert cfg.data == Config.DEFAULT_CONFIG

    def test_non_object_file_uses_defaults(self, tmp_path):
        config_file = get_unique_config_path(tmp_path)
        config_file.write_text("[1, 2]", encoding="utf-8")

        assert Config(config_file).data == Config.DEFAULT_CONFIG

    def test_defaults_are_not_shared(self, tmp_path):
        cfg1 = Config(get_unique_config_path(tmp_path))
        cfg1.data["api"]["user_agent"] = "Mutated"

        cfg2 = Config(get_unique_config_path(tmp_path))
        assert cfg2.user_agent != "Mutated"


# -------------------------
# Scoring Tests
# -------------------------

class TestScoreBase:
    def test_set_score_base_persists(self, temp_config):
        temp_config.score_base = ScoreBase.ER

        reloaded = Config(temp_config.config_file)
        assert reloaded.score_base is ScoreBase.ER

    def test_invalid_score_base_rejected(self, temp_config):
        with pytest.raises(ValueError):
            temp_config.score_base = "speed"

    def test_unknown_value_in_file_reads_as_atk(self, tmp_path):
        config_file = get_unique_config_path(tmp_path)
        config_file.write_text(json.dumps({"scoring": {"score_base": "speed"}}), encoding="utf-8")

        assert Config(config_file).score_base is ScoreBase.ATK


# -------------------------
# API Guardrail Tests
# -------------------------

class TestApiSettings:
    @pytest.mark.parametrize("value,expected", [(0.01, 0.1), (5.0, 2.0), (1.5, 1.5)])
    def test_rate_limit_is_clamped(self, temp_config, value, expected):
        temp_config.api_rate_limit = value
        assert temp_config.api_rate_limit == expected

    def test_rate_limit_in_file_is_clamped(self, tmp_path):
        config_file = get_unique_config_path(tmp_path)
        config_file.write_text(json.dumps({"api": {"rate_limit_per_second": 50}}), encoding="utf-8")

        assert Config(config_file).api_rate_limit == 2.0

    def test_garbage_rate_limit_uses_default(self, tmp_path):
        config_file = get_unique_config_path(tmp_path)
        config_file.write_text(json.dumps({"api": {"rate_limit_per_second": "fast"}}), encoding="utf-8")

        assert Config(config_file).api_rate_limit == 0.5

    def test_cache_ttl_is_clamped(self, tmp_path):
        config_file = get_unique_config_path(tmp_path)
        config_file.write_text(json.dumps({"api": {"cache_ttl_seconds": 1}}), encoding="utf-8")

        assert Config(config_file).cache_ttl_seconds == 10

    def test_set_timeouts_applies_guardrails(self, temp_config):
        temp_config.set_api_timeouts(0, 1000)
        assert temp_config.get_api_timeouts() == (1, 300)

    def test_enka_base_url_strips_trailing_slash(self, temp_config):
        temp_config.enka_base_url = "http://localhost:9000/api/"
        assert temp_config.enka_base_url == "http://localhost:9000/api"


# -------------------------
# Data / Utility Tests
# -------------------------

class TestDataAndUtility:
    def test_game_data_path_defaults_to_project_data(self, temp_config):
        assert temp_config.game_data_path == DEFAULT_GAME_DATA_PATH

    def test_game_data_path_override(self, tmp_path):
        config_file = get_unique_config_path(tmp_path)
        target = tmp_path / "gameData.json"
        config_file.write_text(json.dumps({"data": {"game_data_path": str(target)}}), encoding="utf-8")

        assert Config(config_file).game_data_path == target

    def test_ui_base_url(self, temp_config):
        assert temp_config.ui_base_url == "https://enka.network/ui"

    def test_reset_to_defaults(self, temp_config):
        temp_config.score_base = "def"
        temp_config.reset_to_defaults()

        assert temp_config.score_base is ScoreBase.ATK
        assert Config(temp_config.config_file).score_base is ScoreBase.ATK

    def test_repr(self, temp_config):
        assert "score_base=atk" in repr(temp_config)

    def test_missing_section_is_restored(self, temp_config):
        temp_config.data.pop("api")
        assert temp_config.api_rate_limit == 0.5
        assert isinstance(temp_config.data["api"], dict)

    def test_game_data_path_expands_user(self, temp_config):
        temp_config.data["data"]["game_data_path"] = "~/gd.json"
        assert "~" not in str(temp_config.game_data_path)
