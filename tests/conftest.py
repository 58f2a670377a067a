import faulthandler
import json
import sys
import time
from pathlib import Path

import pytest

from core.config import Config
from core.game_data import GameDatabase
from core.snapshot import EnkaResponse

FIXTURES_DIR = Path(__file__).parent / "fixtures"

FURINA_ID = 10000089
AYAKA_ID = 10000002


@pytest.fixture
def temp_config(tmp_path):
    """
    Provide a fresh Config with validation.

    This fixture GUARANTEES a clean config or fails loudly.
    """
    # Create unique config file
    config_path = tmp_path / f"config_{id(tmp_path)}_{time.time_ns()}.json"

    # Create config
    config = Config(config_file=config_path)

    # VALIDATE it starts clean (will fail test if not)
    assert config.score_base.value == "atk", \
        f"FIXTURE CONTAMINATED! score_base={config.score_base}, file={config.config_file}"
    assert config.api_rate_limit == 0.5, \
        f"FIXTURE CONTAMINATED! rate_limit={config.api_rate_limit}, file={config.config_file}"

    return config


@pytest.fixture
def game_data_path() -> Path:
    return FIXTURES_DIR / "sample_game_data.json"


@pytest.fixture
def game_db(game_data_path) -> GameDatabase:
    return GameDatabase.from_file(game_data_path)


@pytest.fixture
def sample_payload() -> dict:
    """Decoded Enka.Network response with two showcased characters (fresh copy per test)."""
    with (FIXTURES_DIR / "sample_enka_response.json").open("r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def snapshot(sample_payload) -> EnkaResponse:
    return EnkaResponse.model_validate(sample_payload)


@pytest.fixture
def furina(snapshot):
    return snapshot.find_avatar(FURINA_ID)


@pytest.fixture
def ayaka(snapshot):
    return snapshot.find_avatar(AYAKA_ID)


def pytest_collection_modifyitems(config, items):
    """Assign tier markers based on test location."""
    for item in items:
        path = Path(str(item.fspath)).as_posix()

        if "/tests/integration/" in path:
            item.add_marker(pytest.mark.integration)
            continue

        if "/tests/unit/" in path:
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)


def pytest_sessionstart(session):  # pragma: no cover - test harness init
    """Enable faulthandler for the entire test run to aid diagnosing hangs.

    When a test times out or when a manual break occurs, Python will dump
    stack traces of all threads to stderr.
    """
    try:
        faulthandler.enable(file=sys.stderr, all_threads=True)
    except (OSError, ValueError, AttributeError):
        pass
