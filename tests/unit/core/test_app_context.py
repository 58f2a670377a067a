from __future__ import annotations

import pytest
from unittest.mock import MagicMock

from core.app_context import AppContext, create_app_context, create_enka_client
from core.config import Config
from core.game_data import GameDataError
from core.interfaces import IAppContext

pytestmark = pytest.mark.unit


@pytest.fixture
def config(tmp_path):
    return Config(config_file=tmp_path / "config.json")


class TestAppContextCreation:
    """Tests for AppContext dependency injection wiring."""

    def test_create_app_context_uses_given_config(self, config, game_data_path) -> None:
        ctx = create_app_context(config=config, game_data_path=game_data_path)
        try:
            assert ctx.config is config
            assert ctx.game_db.counts()["characters"] == 2
        finally:
            ctx.close()

    def test_game_data_path_from_config(self, config, game_data_path) -> None:
        config.data["data"]["game_data_path"] = str(game_data_path)
        ctx = create_app_context(config=config)
        try:
            assert ctx.game_db.get_weapon(11513) is not None
        finally:
            ctx.close()

    def test_missing_game_data_gives_empty_database(self, config, tmp_path) -> None:
        ctx = create_app_context(config=config, game_data_path=tmp_path / "missing.json")
        try:
            assert ctx.game_db.counts()["characters"] == 0
        finally:
            ctx.close()

    def test_malformed_game_data_raises(self, config, tmp_path) -> None:
        path = tmp_path / "gameData.json"
        path.write_text("{broken", encoding="utf-8")
        with pytest.raises(GameDataError):
            create_app_context(config=config, game_data_path=path)

    def test_context_satisfies_protocol(self, config, game_data_path) -> None:
        ctx = create_app_context(config=config, game_data_path=game_data_path)
        try:
            assert isinstance(ctx, IAppContext)
        finally:
            ctx.close()


class TestEnkaClientWiring:
    def test_client_follows_config(self, config) -> None:
        config.enka_base_url = "http://localhost:9000/api/"
        config.api_rate_limit = 1.0
        config.set_api_timeouts(5, 20)

        client = create_enka_client(config)
        try:
            assert client.base_url == "http://localhost:9000/api"
            assert client.rate_limiter.calls_per_second == 1.0
            assert client.timeout == (5, 20)
            assert client.cache.default_ttl == 60
            assert client.session.headers["User-Agent"] == config.user_agent
        finally:
            client.close()


class TestAppContextClose:
    def test_close_closes_client(self, config) -> None:
        client = MagicMock()
        ctx = AppContext(config=config, game_db=MagicMock(), enka_client=client)
        ctx.close()
        client.close.assert_called_once()

    def test_close_tolerates_os_error(self, config) -> None:
        client = MagicMock()
        client.close.side_effect = OSError("socket already closed")
        ctx = AppContext(config=config, game_db=MagicMock(), enka_client=client)
        ctx.close()
        client.close.assert_called_once()


class TestReloadClient:
    def test_new_client_follows_updated_config(self, config) -> None:
        old_client = MagicMock()
        ctx = AppContext(config=config, game_db=MagicMock(), enka_client=old_client)
        config.enka_base_url = "http://localhost:9000/api"
        config.api_rate_limit = 2.0

        ctx.reload_client()
        try:
            old_client.close.assert_called_once()
            assert ctx.enka_client is not old_client
            assert ctx.enka_client.base_url == "http://localhost:9000/api"
            assert ctx.enka_client.rate_limiter.calls_per_second == 2.0
        finally:
            ctx.enka_client.close()
