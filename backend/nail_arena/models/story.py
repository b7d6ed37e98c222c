from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from .base import Document

START_LOCATION = "awakening"


class ChoiceAction(str, Enum):
    NAVIGATE = "navigate"
    COMBAT = "combat"
    BOSS = "boss"


class LocationChoice(BaseModel):
    icon: str = ""
    text_en: str
    text_ru: str = ""
    action: ChoiceAction
    target: str
    combat_difficulty: Optional[int] = Field(default=None, ge=1, le=5)
    soul_reward: int = Field(default=0, ge=0)
    boss_id: Optional[str] = None
    requires_boss: Optional[str] = None

    @model_validator(mode="after")
    def _check_action_fields(self) -> "LocationChoice":
        if self.action is not ChoiceAction.NAVIGATE and self.combat_difficulty is None:
            raise ValueError("combat choices need a difficulty")
        if self.action is ChoiceAction.BOSS and not self.boss_id:
            raise ValueError("boss choices need a boss id")
        return self


class Location(BaseModel):
    id: str
    title_en: str
    title_ru: str = ""
    description_en: str
    description_ru: str = ""
    choices: List[LocationChoice] = Field(default_factory=list)


class StoryProgress(Document):
    """Per-account story state; ``id`` is the owning user id."""

    id: str
    current_location: str = START_LOCATION
    defeated_bosses: List[str] = Field(default_factory=list)
    unlocked_abilities: List[str] = Field(default_factory=list)
    visited_locations: List[str] = Field(default_factory=lambda: [START_LOCATION])
    has_void_heart: bool = False

    @classmethod
    def initial(cls, user_id: str) -> "StoryProgress":
        return cls(id=user_id)
