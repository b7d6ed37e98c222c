from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import Document, new_id, utcnow


class TradeLink(Document):
    """An escrowed nail offered through a one-shot code.

    The offered nail leaves the sender's inventory when the link is created,
    so the link keeps a snapshot of the definition and variant it carries.
    """

    id: str = Field(default_factory=new_id)
    code: str
    from_user_id: str
    user_nail_id: str
    nail_id: str
    is_dream: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    claimed_by: Optional[str] = None
    claimed_at: Optional[datetime] = None

    @property
    def is_claimed(self) -> bool:
        return self.claimed_by is not None


class AdminLink(Document):
    id: str = Field(default_factory=new_id)
    code: str
    created_by: str
    soul_amount: int = Field(default=0, ge=0)
    dream_points_amount: int = Field(default=0, ge=0)
    uses_remaining: Optional[int] = Field(default=None, ge=0)
    claims_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def exhausted(self) -> bool:
        return self.uses_remaining is not None and self.claims_count >= self.uses_remaining


class AdminLinkClaim(Document):
    id: str = Field(default_factory=new_id)
    link_id: str
    user_id: str
    claimed_at: datetime = Field(default_factory=utcnow)
