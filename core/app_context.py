# core/app_context.py
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

from core.config import Config
from core.game_data import GameDatabase, load_game_database
from data_sources.enka_client import EnkaClient


@dataclass
class AppContext:
    """
    Aggregates core services used by the CLI and the HTTP API.

    Keeps wiring in one place so entry points only orchestrate:
    - config: user settings (score base, API tuning, data paths)
    - game_db: static id -> name/icon lookups, loaded once
    - enka_client: Enka.Network snapshot client (HTTP session, cache)

    Call close() when the application exits to release resources.
    """
    config: Config
    game_db: GameDatabase
    enka_client: EnkaClient

    def close(self) -> None:
        """Close the HTTP session held by the Enka.Network client."""
        logger = logging.getLogger(__name__)
        logger.info("Closing AppContext resources...")

        if self.enka_client:
            try:
                self.enka_client.close()
                logger.debug("Enka.Network client closed")
            except OSError as e:
                logger.error(f"Error closing Enka.Network client: {e}")

        logger.info("AppContext resources closed")

    def reload_client(self) -> None:
        """Replace the Enka.Network client after its config settings change."""
        logger = logging.getLogger(__name__)
        old_client = self.enka_client
        self.enka_client = create_enka_client(self.config)
        if old_client:
            try:
                old_client.close()
            except OSError as e:
                logger.error(f"Error closing Enka.Network client: {e}")
        logger.info(f"Enka.Network client reloaded for {self.config.enka_base_url}")



def create_enka_client(config: Config) -> EnkaClient:
    """Build an Enka.Network client tuned by the config's api section."""
    return EnkaClient(
        base_url=config.enka_base_url,
        rate_limit=config.api_rate_limit,
        cache_ttl=config.cache_ttl_seconds,
        user_agent=config.user_agent,
        timeout=config.get_api_timeouts(),
    )


def create_app_context(config: Optional[Config] = None, game_data_path=None) -> AppContext:
    """
    Wire up config, game database and API client.

    Args:
        config: Existing config; the user config file is loaded when omitted
        game_data_path: Overrides config.game_data_path

    Raises:
        GameDataError: If the game database file exists but is malformed
    """
    logger = logging.getLogger(__name__)
    config = config or Config()

    path = game_data_path or config.game_data_path
    game_db = load_game_database(path)
    logger.info(f"Game database: {game_db.counts()}")

    return AppContext(
        config=config,
        game_db=game_db,
        enka_client=create_enka_client(config),
    )
