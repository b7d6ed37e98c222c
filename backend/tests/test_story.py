"""Tests for the story graph and story progression."""

from __future__ import annotations

import pytest

from nail_arena.data.story_locations import STORY_LOCATIONS
from nail_arena.errors import ConfigurationError, ConflictError, ValidationError
from nail_arena.models import StoryProgress
from nail_arena.repositories import Stores
from nail_arena.services import BattleService, StoryService
from nail_arena.services.story import STORY_GRAPH, StoryGraph

from conftest import give_nail


def _choice_index(location_id: str, target: str) -> int:
    choices = STORY_GRAPH.get(location_id).choices
    return next(index for index, choice in enumerate(choices) if choice.target == target)


class TestStoryGraph:
    def test_shipped_graph_is_valid(self):
        assert len(STORY_GRAPH.locations) == 15
        assert STORY_GRAPH.start == "awakening"

    def test_unknown_target_is_rejected(self):
        broken = [dict(entry) for entry in STORY_LOCATIONS]
        broken[0] = {**broken[0], "choices": [{"text_en": "Nowhere", "action": "navigate", "target": "void"}]}
        with pytest.raises(ConfigurationError):
            StoryGraph.from_data(broken)

    def test_fully_locked_location_is_rejected(self):
        entries = [
            {
                "id": "awakening",
                "title_en": "Awakening",
                "description_en": "",
                "choices": [
                    {"text_en": "Onward", "action": "navigate", "target": "awakening", "requires_boss": "hornet"},
                ],
            }
        ]
        with pytest.raises(ConfigurationError):
            StoryGraph.from_data(entries)


class TestStoryProgress:
    @pytest.mark.asyncio
    async def test_initial_view(self, story: StoryService):
        view = await story.view("alice")

        assert view.location.id == "awakening"
        assert view.progress.visited_locations == ["awakening"]
        assert [choice.enabled for choice in view.choices] == [True]

    @pytest.mark.asyncio
    async def test_navigate_records_visit(self, story: StoryService):
        result = await story.choose("alice", 0)

        assert result.battle is None
        assert result.progress.current_location == "crossroads"
        assert result.progress.visited_locations == ["awakening", "crossroads"]

    @pytest.mark.asyncio
    async def test_invalid_index(self, story: StoryService):
        with pytest.raises(ValidationError):
            await story.choose("alice", 5)

    @pytest.mark.asyncio
    async def test_locked_choice_is_reported_and_rejected(self, story: StoryService, stores: Stores):
        await stores.story.save(StoryProgress(id="alice", current_location="queens_station"))
        view = await story.view("alice")
        index = _choice_index("queens_station", "deepnest")

        assert view.choices[index].enabled is False
        with pytest.raises(ValidationError):
            await story.choose("alice", index, "any-nail")

    @pytest.mark.asyncio
    async def test_boss_gate_opens_after_defeat(self, story: StoryService, stores: Stores):
        await stores.story.save(
            StoryProgress(id="alice", current_location="queens_station", defeated_bosses=["hornet"])
        )
        view = await story.view("alice")
        assert all(choice.enabled for choice in view.choices)

    @pytest.mark.asyncio
    async def test_combat_choice_needs_a_nail(self, story: StoryService):
        await story.choose("alice", 0)
        with pytest.raises(ValidationError):
            await story.choose("alice", 0)

    @pytest.mark.asyncio
    async def test_story_combat_victory_moves_and_pays_bonus(
        self, story: StoryService, battles: BattleService, stores: Stores
    ):
        await story.choose("alice", 0)
        owned = await give_nail(stores, "alice", "pure_nail")
        index = _choice_index("crossroads", "greenpath")

        result = await story.choose("alice", index, owned.id)
        assert result.battle.is_dream is False
        assert result.battle.preset.level == 2
        await battles.attack("alice", bar_value=50)

        progress = await story.get_progress("alice")
        assert progress.current_location == "greenpath"
        assert "greenpath" in progress.visited_locations
        record = (await battles.list_history("alice"))[0]
        assert 85 <= record.soul_gained < 105

    @pytest.mark.asyncio
    async def test_boss_victory_unlocks_ability(self, story: StoryService, battles: BattleService, stores: Stores):
        await stores.story.save(StoryProgress(id="alice", current_location="crossroads"))
        owned = await give_nail(stores, "alice", "pure_nail")
        result = await story.choose("alice", _choice_index("crossroads", "arena_false"), owned.id)
        assert result.battle.boss_id == "false_knight"

        for _ in range(10):
            await battles.attack("alice", bar_value=50)
            if battles.get_current("alice") is None:
                break

        progress = await story.get_progress("alice")
        assert progress.current_location == "arena_false"
        assert progress.defeated_bosses == ["false_knight"]
        assert progress.unlocked_abilities == ["dash"]

    @pytest.mark.asyncio
    async def test_final_boss_grants_void_heart(self, story: StoryService, stores: Stores):
        await stores.story.save(StoryProgress(id="alice", current_location="black_egg"))
        progress = await story.complete_encounter("alice", "black_egg", 0, won=True)

        assert progress.has_void_heart is True
        assert "hollow_knight" in progress.defeated_bosses
        assert "void_heart" in progress.unlocked_abilities

    @pytest.mark.asyncio
    async def test_defeat_leaves_progress_untouched(self, story: StoryService, stores: Stores):
        saved = await stores.story.save(StoryProgress(id="alice", current_location="crossroads"))
        progress = await story.complete_encounter("alice", "crossroads", 2, won=False)
        assert progress == saved

    @pytest.mark.asyncio
    async def test_repeat_boss_does_not_duplicate_rewards(self, story: StoryService, stores: Stores):
        await stores.story.save(StoryProgress(id="alice", current_location="crossroads"))
        await story.complete_encounter("alice", "crossroads", 2, won=True)
        progress = await story.complete_encounter("alice", "crossroads", 2, won=True)

        assert progress.defeated_bosses == ["false_knight"]
        assert progress.unlocked_abilities == ["dash"]

    @pytest.mark.asyncio
    async def test_reset(self, story: StoryService, stores: Stores):
        await stores.story.save(
            StoryProgress(id="alice", current_location="abyss", defeated_bosses=["hornet"], unlocked_abilities=["thread"])
        )
        progress = await story.reset("alice")
        assert progress == StoryProgress.initial("alice")


class TestStoryDuringBattle:
    @pytest.mark.asyncio
    async def test_reset_and_navigate_wait_for_the_battle(
        self, story: StoryService, battles: BattleService, stores: Stores
    ):
        await story.choose("alice", 0)
        owned = await give_nail(stores, "alice", "pure_nail")
        await story.choose("alice", _choice_index("crossroads", "greenpath"), owned.id)

        with pytest.raises(ConflictError):
            await story.reset("alice")
        with pytest.raises(ConflictError):
            await story.choose("alice", _choice_index("crossroads", "crossroads"))

        await battles.attack("alice", bar_value=50)
        assert (await story.get_progress("alice")).current_location == "greenpath"
        assert (await story.reset("alice")).current_location == "awakening"

    @pytest.mark.asyncio
    async def test_stale_victory_does_not_move_progress(self, story: StoryService, stores: Stores):
        await stores.story.save(StoryProgress(id="alice"))
        progress = await story.complete_encounter("alice", "crossroads", 2, won=True)

        assert progress == StoryProgress.initial("alice")

    @pytest.mark.asyncio
    async def test_abandoned_story_battle_keeps_progress(
        self, story: StoryService, battles: BattleService, stores: Stores
    ):
        await stores.story.save(StoryProgress(id="alice", current_location="crossroads"))
        owned = await give_nail(stores, "alice")
        await story.choose("alice", _choice_index("crossroads", "arena_false"), owned.id)

        await battles.abandon("alice")

        progress = await story.get_progress("alice")
        assert progress.current_location == "crossroads"
        assert progress.defeated_bosses == []
