from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from .base import Document, new_id, utcnow


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class NailDefinition(Document):
    """Catalog entry. ``order_index`` drives both display order and drop weight."""

    id: str
    name: str
    name_ru: str = ""
    rarity: Rarity
    base_damage: int = Field(..., ge=0)
    sell_value: int = Field(..., ge=0)
    dream_sell_value: int = Field(..., ge=0)
    order_index: int = Field(..., ge=1)


class OwnedNail(Document):
    id: str = Field(default_factory=new_id)
    nail_id: str
    user_id: str
    is_dream: bool = False
    acquired_at: datetime = Field(default_factory=utcnow)


class OwnedNailView(BaseModel):
    """Owned nail joined with its catalog definition."""

    id: str
    is_dream: bool
    acquired_at: datetime
    nail: NailDefinition

    @property
    def sell_price(self) -> int:
        return self.nail.dream_sell_value if self.is_dream else self.nail.sell_value
