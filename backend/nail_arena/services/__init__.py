"""Game rules: loot, combat, economy and story."""

from .battles import BattleService
from .economy import EconomyService
from .story import StoryService

__all__ = ["BattleService", "EconomyService", "StoryService"]
