from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..data.story_locations import STORY_LOCATIONS
from ..errors import ConfigurationError, ConflictError, NotFoundError, ValidationError
from ..models import ChoiceAction, Location, LocationChoice, StoryProgress
from ..models.story import START_LOCATION
from ..repositories import Stores
from .abilities import BOSS_ABILITIES, FINAL_BOSS, ability_for_boss
from .battles import BattleService
from .combat import BattleSession

logger = logging.getLogger(__name__)


class StoryGraph:
    """Immutable location graph, validated on construction."""

    def __init__(self, locations: Iterable[Location], start: str = START_LOCATION) -> None:
        self.locations: Dict[str, Location] = {location.id: location for location in locations}
        self.start = start
        self._validate()

    @classmethod
    def from_data(cls, entries: Iterable[dict] = STORY_LOCATIONS) -> "StoryGraph":
        return cls(Location(**entry) for entry in entries)

    def _validate(self) -> None:
        if self.start not in self.locations:
            raise ConfigurationError(f"Start location '{self.start}' is missing")
        for location in self.locations.values():
            if not location.choices:
                raise ConfigurationError(f"Location '{location.id}' has no choices")
            if all(choice.requires_boss for choice in location.choices):
                raise ConfigurationError(f"Location '{location.id}' is locked for a new player")
            for choice in location.choices:
                if choice.target not in self.locations:
                    raise ConfigurationError(f"Location '{location.id}' points to unknown '{choice.target}'")
                if choice.boss_id and choice.boss_id not in BOSS_ABILITIES:
                    raise ConfigurationError(f"Unknown boss '{choice.boss_id}' in '{location.id}'")
                if choice.requires_boss and choice.requires_boss not in BOSS_ABILITIES:
                    raise ConfigurationError(f"Unknown required boss '{choice.requires_boss}' in '{location.id}'")

    def get(self, location_id: str) -> Location:
        try:
            return self.locations[location_id]
        except KeyError:
            raise NotFoundError(f"Unknown location '{location_id}'") from None

    def choice(self, location_id: str, index: int) -> LocationChoice:
        choices = self.get(location_id).choices
        if not 0 <= index < len(choices):
            raise ValidationError("Invalid choice")
        return choices[index]


def choice_enabled(choice: LocationChoice, progress: StoryProgress) -> bool:
    return choice.requires_boss is None or choice.requires_boss in progress.defeated_bosses


@dataclass
class ChoiceView:
    index: int
    choice: LocationChoice
    enabled: bool


@dataclass
class StoryView:
    location: Location
    choices: List[ChoiceView]
    progress: StoryProgress


@dataclass
class ChoiceResult:
    progress: StoryProgress
    battle: Optional[BattleSession] = None


class StoryService:
    def __init__(self, stores: Stores, battles: BattleService, graph: StoryGraph | None = None) -> None:
        self.stores = stores
        self.battles = battles
        self.graph = graph or STORY_GRAPH

    async def get_progress(self, user_id: str) -> StoryProgress:
        progress = await self.stores.story.get(user_id)
        if progress is None:
            progress = await self.stores.story.save(StoryProgress.initial(user_id))
        return progress

    async def view(self, user_id: str) -> StoryView:
        progress = await self.get_progress(user_id)
        location = self.graph.get(progress.current_location)
        choices = [
            ChoiceView(index=index, choice=choice, enabled=choice_enabled(choice, progress))
            for index, choice in enumerate(location.choices)
        ]
        return StoryView(location=location, choices=choices, progress=progress)

    def _ensure_idle(self, user_id: str) -> None:
        if self.battles.get_current(user_id) is not None:
            raise ConflictError("Finish or abandon the current battle first")

    async def choose(self, user_id: str, index: int, owned_nail_id: Optional[str] = None) -> ChoiceResult:
        self._ensure_idle(user_id)
        progress = await self.get_progress(user_id)
        location_id = progress.current_location
        choice = self.graph.choice(location_id, index)
        if not choice_enabled(choice, progress):
            raise ValidationError("This path is still locked")

        if choice.action is ChoiceAction.NAVIGATE:
            return ChoiceResult(progress=await self._move(progress, choice.target))

        if not owned_nail_id:
            raise ValidationError("Select a nail before fighting")

        async def on_finish(session: BattleSession) -> None:
            await self.complete_encounter(user_id, location_id, index, session.won)

        battle = await self.battles.start_battle(
            user_id,
            owned_nail_id,
            choice.combat_difficulty,
            boss_id=choice.boss_id if choice.action is ChoiceAction.BOSS else None,
            soul_bonus=choice.soul_reward,
            on_finish=on_finish,
        )
        return ChoiceResult(progress=progress, battle=battle)

    async def complete_encounter(self, user_id: str, location_id: str, index: int, won: bool) -> StoryProgress:
        progress = await self.get_progress(user_id)
        if not won:
            return progress
        if progress.current_location != location_id:
            logger.warning(
                "Ignoring encounter result for user %s: left %s for %s", user_id, location_id, progress.current_location
            )
            return progress

        choice = self.graph.choice(location_id, index)
        if choice.action is ChoiceAction.BOSS and choice.boss_id:
            progress = self._defeat_boss(progress, choice.boss_id)
        return await self._move(progress, choice.target)

    def _defeat_boss(self, progress: StoryProgress, boss_id: str) -> StoryProgress:
        update: dict = {}
        if boss_id not in progress.defeated_bosses:
            update["defeated_bosses"] = [*progress.defeated_bosses, boss_id]
        ability = ability_for_boss(boss_id)
        if ability is not None and ability.value not in progress.unlocked_abilities:
            update["unlocked_abilities"] = [*progress.unlocked_abilities, ability.value]
        if boss_id == FINAL_BOSS:
            update["has_void_heart"] = True
        logger.info("User %s defeated %s", progress.id, boss_id)
        return progress.model_copy(update=update)

    async def _move(self, progress: StoryProgress, target: str) -> StoryProgress:
        visited = progress.visited_locations
        if target not in visited:
            visited = [*visited, target]
        moved = progress.model_copy(update={"current_location": target, "visited_locations": visited})
        return await self.stores.story.save(moved)

    async def reset(self, user_id: str) -> StoryProgress:
        self._ensure_idle(user_id)
        logger.info("User %s reset story progress", user_id)
        return await self.stores.story.save(StoryProgress.initial(user_id))


STORY_GRAPH = StoryGraph.from_data()
