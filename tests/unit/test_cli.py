"""Tests for the command-line entry point (main.py)."""
from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

import main as cli
from core.build_models import default_build
from core.scoring import score_build

pytestmark = pytest.mark.unit

FIXTURES_DIR = Path(__file__).resolve().parents[1] / "fixtures"


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep config and logs out of the real home directory."""
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level
    yield tmp_path
    for handler in list(root_logger.handlers):
        if handler not in saved_handlers:
            root_logger.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(saved_level)


def run(*args):
    return cli.main([
        "800123456",
        "--snapshot", str(FIXTURES_DIR / "sample_enka_response.json"),
        "--game-data", str(FIXTURES_DIR / "sample_game_data.json"),
        *args,
    ])


class TestMain:
    def test_prints_summary(self, capsys):
        assert run() == 0

        out = capsys.readouterr().out
        assert "フリーナ  Lv.90  C2  [水]" in out
        assert "静水流転の輝き  Lv.90  R1" in out
        assert "Sets: 黄金の劇団 x3" in out
        assert "Total (攻撃力換算): 150.5 [B]" in out

    def test_marks_scoring_substats(self, capsys):
        run()
        out = capsys.readouterr().out
        assert "* 会心率 10.5%" in out
        assert "  HP% 9.9%" in out

    def test_json_output(self, capsys):
        assert run("--json", "--score-base", "hp") == 0

        data = json.loads(capsys.readouterr().out)
        assert data["build"]["scoreBase"] == "hp"
        assert data["score"]["artifacts"][0]["score"] == 51.9

    def test_selects_avatar(self, capsys):
        assert run("--avatar-id", "10000002") == 0
        assert "神里綾華" in capsys.readouterr().out

    def test_missing_avatar(self, capsys):
        assert run("--avatar-id", "1") == 1
        assert "Character 1 is not showcased for UID 800123456" in capsys.readouterr().err

    def test_unreadable_snapshot(self, tmp_path, capsys):
        code = cli.main(["800123456", "--snapshot", str(tmp_path / "missing.json")])
        assert code == 1
        assert "Could not read snapshot" in capsys.readouterr().err

    def test_malformed_game_data(self, tmp_path, capsys):
        bad = tmp_path / "gameData.json"
        bad.write_text("[]", encoding="utf-8")

        code = cli.main(["800123456", "--snapshot", str(FIXTURES_DIR / "sample_enka_response.json"),
                         "--game-data", str(bad)])
        assert code == 1
        assert "Error:" in capsys.readouterr().err


class TestFormatSummary:
    def test_empty_build(self):
        build = default_build()
        text = cli.format_summary(build, score_build(build))
        assert "Total (攻撃力換算): 0.0 [B]" in text
        assert "Sets:" not in text
