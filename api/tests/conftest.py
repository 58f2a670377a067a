"""
api.tests.conftest - Pytest fixtures for API tests.

Provides a test client wired to a real game database and config, with the
Enka.Network client replaced by a mock.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from core.config import Config
from core.game_data import GameDatabase
from core.result import Ok
from core.snapshot import EnkaResponse

FIXTURES_DIR = Path(__file__).resolve().parents[2] / "tests" / "fixtures"


@pytest.fixture
def sample_payload() -> dict[str, Any]:
    """Decoded Enka.Network response with two showcased characters."""
    with (FIXTURES_DIR / "sample_enka_response.json").open("r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def game_db() -> GameDatabase:
    return GameDatabase.from_file(FIXTURES_DIR / "sample_game_data.json")


@pytest.fixture
def mock_config(tmp_path) -> Config:
    """Real config isolated in a temp directory."""
    return Config(config_file=tmp_path / "config.json")


@pytest.fixture
def mock_enka_client(sample_payload: dict[str, Any]) -> MagicMock:
    """Create a mock Enka.Network client returning the sample showcase."""
    client = MagicMock()
    client.fetch_raw.return_value = Ok(sample_payload)
    client.fetch_snapshot.return_value = Ok(EnkaResponse.model_validate(sample_payload))
    client.cache.stats.return_value = {
        "hits": 3,
        "misses": 1,
        "sets": 1,
        "evictions": 0,
        "size": 1,
        "capacity": 128,
    }
    return client


@pytest.fixture
def mock_app_context(
    mock_config: Config,
    game_db: GameDatabase,
    mock_enka_client: MagicMock,
) -> MagicMock:
    """Create a mock app context with all services."""
    ctx = MagicMock()
    ctx.config = mock_config
    ctx.game_db = game_db
    ctx.enka_client = mock_enka_client
    ctx.close = MagicMock()
    return ctx


@pytest.fixture
def client(mock_app_context: MagicMock, monkeypatch) -> Generator[TestClient, None, None]:
    """Create a test client with mocked dependencies."""
    # Import here to avoid circular imports
    from api.main import app
    from api import dependencies

    # The lifespan builds its context through this factory; keep it off ~/
    monkeypatch.setattr("core.app_context.create_app_context", lambda: mock_app_context)

    # Override the get_app_context function in dependencies module
    original_get_ctx = dependencies.get_app_context

    def mock_get_ctx():
        return mock_app_context

    dependencies.get_app_context = mock_get_ctx

    # Override in FastAPI dependency system
    app.dependency_overrides[original_get_ctx] = mock_get_ctx

    with TestClient(app) as test_client:
        yield test_client

    # Restore
    dependencies.get_app_context = original_get_ctx
    app.dependency_overrides.clear()
