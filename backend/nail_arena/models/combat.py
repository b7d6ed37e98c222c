from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import Document, new_id, utcnow


class CombatHistoryRecord(Document):
    """Append-only log row written when a battle ends."""

    id: str = Field(default_factory=new_id)
    user_id: str
    nail_id: Optional[str] = None
    won: bool
    is_dream: bool = False
    soul_gained: int = Field(default=0, ge=0)
    dream_points_gained: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)
