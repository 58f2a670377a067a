"""
Service interfaces for dependency injection.

Provides Protocol definitions so the normalizer, API routers and tests can
depend on the query interface of a service instead of its concrete class.

Usage:
    from core.interfaces import IGameDatabase

    def normalize(avatar, game_db: IGameDatabase, current): ...

Any object with matching lookup methods (including a test double) satisfies
the protocol.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from core.config import Config
    from core.game_data import ArtifactRecord, CharacterRecord, WeaponRecord
    from data_sources.enka_client import EnkaClient


@runtime_checkable
class IGameDatabase(Protocol):
    """Read-only lookups into the static game database.

    Every method returns None for an unknown id; absence is never an error.
    """

    def get_character(self, character_id: Union[int, str]) -> Optional["CharacterRecord"]:
        ...

    def get_weapon(self, weapon_id: Union[int, str]) -> Optional["WeaponRecord"]:
        ...

    def get_artifact_piece(self, piece_id: Union[int, str]) -> Optional["ArtifactRecord"]:
        ...

    def get_set_name(self, set_id: Union[int, str]) -> Optional[str]:
        ...

    def counts(self) -> Dict[str, int]:
        ...


@runtime_checkable
class IAppContext(Protocol):
    """Interface for the application context shared by CLI and API."""

    @property
    def config(self) -> "Config":
        ...

    @property
    def game_db(self) -> IGameDatabase:
        ...

    @property
    def enka_client(self) -> "EnkaClient":
        ...

    def close(self) -> None:
        ...

    def reload_client(self) -> None:
        ...
