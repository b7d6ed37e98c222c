from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Mapping, Optional, Protocol

from ..models import (
    AdminLink,
    CombatHistoryRecord,
    DreamPointDeduction,
    NailDefinition,
    OwnedNail,
    Profile,
    StoryProgress,
    TradeLink,
)


class ProfileStoreProtocol(Protocol):
    """Balances per account."""

    async def get(self, user_id: str) -> Optional[Profile]: ...

    async def create(self, profile: Profile) -> Profile:
        """Insert ``profile`` unless one exists; return the stored profile."""
        ...

    async def apply_delta(self, user_id: str, deltas: Mapping[str, int]) -> Profile:
        """Atomically add ``deltas`` to the balances.

        Raises ``InsufficientFundsError`` and leaves the row untouched when any
        resulting balance would be negative.
        """
        ...


class CatalogStoreProtocol(Protocol):
    async def seed_if_empty(self, *, definitions: Iterable[dict] | None = None) -> None: ...

    async def list_nails(self) -> List[NailDefinition]:
        """Return every definition ordered by ``order_index`` ascending."""
        ...

    async def get_nail(self, nail_id: str) -> Optional[NailDefinition]: ...


class InventoryStoreProtocol(Protocol):
    async def list_owned(self, user_id: str) -> List[OwnedNail]: ...

    async def get_owned(self, owned_id: str) -> Optional[OwnedNail]: ...

    async def insert_owned(self, owned: OwnedNail) -> OwnedNail: ...

    async def delete_owned(self, owned_id: str, user_id: str) -> Optional[OwnedNail]:
        """Remove the row if ``user_id`` owns it; return the removed row or None."""
        ...


class HistoryStoreProtocol(Protocol):
    async def append_combat_record(self, record: CombatHistoryRecord) -> None: ...

    async def list_combat_records(self, user_id: str, limit: int = 50) -> List[CombatHistoryRecord]: ...

    async def append_deduction(self, deduction: DreamPointDeduction) -> None: ...

    async def list_deductions(self, user_id: str) -> List[DreamPointDeduction]: ...


class TradeLinkStoreProtocol(Protocol):
    async def create_link(self, link: TradeLink) -> TradeLink: ...

    async def get_link_by_code(self, code: str) -> Optional[TradeLink]: ...

    async def delete_link(self, link_id: str) -> None: ...

    async def claim_link(self, code: str, user_id: str, claimed_at: datetime) -> Optional[TradeLink]:
        """Set ``claimed_by`` only if it is unset and the caller is not the sender.

        Returns the claimed link, or None when the guard did not match.
        """
        ...

    async def release_claim(self, link_id: str, user_id: str) -> bool: ...


class AdminLinkStoreProtocol(Protocol):
    async def create_link(self, link: AdminLink) -> AdminLink: ...

    async def get_by_code(self, code: str) -> Optional[AdminLink]: ...

    async def list_by_creator(self, user_id: str) -> List[AdminLink]: ...

    async def count_claims(self, link_id: str) -> int: ...

    async def has_claim(self, link_id: str, user_id: str) -> bool: ...

    async def reserve_use(self, link_id: str) -> bool:
        """Take one use if the link is unlimited or below its cap."""
        ...

    async def release_use(self, link_id: str) -> None: ...

    async def insert_claim(self, link_id: str, user_id: str) -> bool:
        """Insert the ``(link_id, user_id)`` row; False if it already exists."""
        ...


class RoleStoreProtocol(Protocol):
    async def has_role(self, user_id: str, role: str) -> bool: ...

    async def grant_role(self, user_id: str, role: str) -> None: ...


class StoryProgressStoreProtocol(Protocol):
    async def get(self, user_id: str) -> Optional[StoryProgress]: ...

    async def save(self, progress: StoryProgress) -> StoryProgress: ...


@dataclass
class Stores:
    """The set of collaborators the game core talks to."""

    profiles: ProfileStoreProtocol
    catalog: CatalogStoreProtocol
    inventory: InventoryStoreProtocol
    history: HistoryStoreProtocol
    trade_links: TradeLinkStoreProtocol
    admin_links: AdminLinkStoreProtocol
    roles: RoleStoreProtocol
    story: StoryProgressStoreProtocol
