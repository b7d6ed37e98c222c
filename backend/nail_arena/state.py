from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .repositories import Stores
from .services import BattleService, EconomyService, StoryService


@dataclass
class GameServices:
    stores: Stores
    economy: EconomyService
    battles: BattleService
    story: StoryService

    @classmethod
    def build(cls, stores: Stores) -> "GameServices":
        economy = EconomyService(stores)
        battles = BattleService(stores, economy)
        return cls(stores=stores, economy=economy, battles=battles, story=StoryService(stores, battles))


_services_provider: Callable[[], GameServices] | None = None


def set_services_provider(provider: Callable[[], GameServices]) -> None:
    """Register a callable that returns the active game services."""

    global _services_provider
    _services_provider = provider


def get_services() -> GameServices:
    if _services_provider is None:
        raise RuntimeError("Game services provider has not been configured")
    return _services_provider()


def get_economy() -> EconomyService:
    """FastAPI dependency returning the economy service."""

    return get_services().economy


def get_battles() -> BattleService:
    return get_services().battles


def get_story() -> StoryService:
    return get_services().story
