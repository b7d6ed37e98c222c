from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from .base import Document, new_id, utcnow

Currency = Literal["soul", "dream_points", "masks", "coins"]
BALANCE_FIELDS: tuple[str, ...] = ("soul", "dream_points", "masks", "coins")


class Profile(Document):
    """Per-account balances. Every balance is non-negative at rest."""

    id: str
    soul: int = Field(default=0, ge=0)
    dream_points: int = Field(default=0, ge=0)
    masks: int = Field(default=0, ge=0)
    coins: int = Field(default=0, ge=0)

    def balance(self, field: str) -> int:
        return int(getattr(self, field))


class DreamPointDeduction(Document):
    """Audit row written whenever dream points leave a profile without a purchase."""

    id: str = Field(default_factory=new_id)
    user_id: str
    amount: int = Field(..., gt=0)
    reason: str
    created_at: datetime = Field(default_factory=utcnow)
