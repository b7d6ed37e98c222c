"""In-memory stores used when MongoDB is unavailable and in tests.

Methods never await while touching state, so each call is atomic on the
event loop.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from ..data.nail_definitions import NAIL_DEFINITIONS
from ..errors import ConflictError, InsufficientFundsError, NotFoundError
from ..models import (
    BALANCE_FIELDS,
    AdminLink,
    AdminLinkClaim,
    CombatHistoryRecord,
    DreamPointDeduction,
    NailDefinition,
    OwnedNail,
    Profile,
    StoryProgress,
    TradeLink,
)
from .protocols import Stores


class InMemoryProfileStore:
    def __init__(self) -> None:
        self._store: Dict[str, Profile] = {}

    async def get(self, user_id: str) -> Optional[Profile]:
        return self._store.get(user_id)

    async def create(self, profile: Profile) -> Profile:
        return self._store.setdefault(profile.id, profile)

    async def apply_delta(self, user_id: str, deltas: Mapping[str, int]) -> Profile:
        existing = self._store.get(user_id)
        if existing is None:
            raise NotFoundError("Profile not found")

        data = existing.model_dump()
        for field, delta in deltas.items():
            if field not in BALANCE_FIELDS:
                raise ValueError(f"Unknown balance field '{field}'")
            data[field] += delta
            if data[field] < 0:
                raise InsufficientFundsError(field)
        profile = Profile(**data)
        self._store[user_id] = profile
        return profile


class InMemoryCatalogStore:
    def __init__(self) -> None:
        self._store: Dict[str, NailDefinition] = {}

    async def seed_if_empty(self, *, definitions: Iterable[dict] | None = None) -> None:
        if self._store:
            return

        source = definitions if definitions is not None else NAIL_DEFINITIONS
        for entry in source:
            nail = NailDefinition(**entry)
            self._store[nail.id] = nail

    async def list_nails(self) -> List[NailDefinition]:
        return sorted(self._store.values(), key=lambda nail: nail.order_index)

    async def get_nail(self, nail_id: str) -> Optional[NailDefinition]:
        return self._store.get(nail_id)


class InMemoryInventoryStore:
    def __init__(self) -> None:
        self._store: Dict[str, OwnedNail] = {}

    async def list_owned(self, user_id: str) -> List[OwnedNail]:
        owned = [row for row in self._store.values() if row.user_id == user_id]
        return sorted(owned, key=lambda row: row.acquired_at, reverse=True)

    async def get_owned(self, owned_id: str) -> Optional[OwnedNail]:
        return self._store.get(owned_id)

    async def insert_owned(self, owned: OwnedNail) -> OwnedNail:
        self._store[owned.id] = owned
        return owned

    async def delete_owned(self, owned_id: str, user_id: str) -> Optional[OwnedNail]:
        row = self._store.get(owned_id)
        if row is None or row.user_id != user_id:
            return None
        return self._store.pop(owned_id)


class InMemoryHistoryStore:
    def __init__(self) -> None:
        self._combat: List[CombatHistoryRecord] = []
        self._deductions: List[DreamPointDeduction] = []

    async def append_combat_record(self, record: CombatHistoryRecord) -> None:
        self._combat.append(record)

    async def list_combat_records(self, user_id: str, limit: int = 50) -> List[CombatHistoryRecord]:
        rows = [row for row in reversed(self._combat) if row.user_id == user_id]
        return rows[:limit]

    async def append_deduction(self, deduction: DreamPointDeduction) -> None:
        self._deductions.append(deduction)

    async def list_deductions(self, user_id: str) -> List[DreamPointDeduction]:
        return [row for row in self._deductions if row.user_id == user_id]


class InMemoryTradeLinkStore:
    def __init__(self) -> None:
        self._store: Dict[str, TradeLink] = {}

    async def create_link(self, link: TradeLink) -> TradeLink:
        if any(existing.code == link.code for existing in self._store.values()):
            raise ConflictError("Trade code collision, please try again")
        self._store[link.id] = link
        return link

    async def get_link_by_code(self, code: str) -> Optional[TradeLink]:
        return next((link for link in self._store.values() if link.code == code), None)

    async def delete_link(self, link_id: str) -> None:
        self._store.pop(link_id, None)

    async def claim_link(self, code: str, user_id: str, claimed_at: datetime) -> Optional[TradeLink]:
        link = await self.get_link_by_code(code)
        if link is None or link.claimed_by is not None or link.from_user_id == user_id:
            return None
        claimed = link.model_copy(update={"claimed_by": user_id, "claimed_at": claimed_at})
        self._store[link.id] = claimed
        return claimed

    async def release_claim(self, link_id: str, user_id: str) -> bool:
        link = self._store.get(link_id)
        if link is None or link.claimed_by != user_id:
            return False
        self._store[link_id] = link.model_copy(update={"claimed_by": None, "claimed_at": None})
        return True


class InMemoryAdminLinkStore:
    def __init__(self) -> None:
        self._links: Dict[str, AdminLink] = {}
        self._claims: Dict[Tuple[str, str], AdminLinkClaim] = {}

    async def create_link(self, link: AdminLink) -> AdminLink:
        self._links[link.id] = link
        return link

    async def get_by_code(self, code: str) -> Optional[AdminLink]:
        return next((link for link in self._links.values() if link.code == code), None)

    async def list_by_creator(self, user_id: str) -> List[AdminLink]:
        links = [link for link in self._links.values() if link.created_by == user_id]
        return sorted(links, key=lambda link: link.created_at, reverse=True)

    async def count_claims(self, link_id: str) -> int:
        return sum(1 for key in self._claims if key[0] == link_id)

    async def has_claim(self, link_id: str, user_id: str) -> bool:
        return (link_id, user_id) in self._claims

    async def reserve_use(self, link_id: str) -> bool:
        link = self._links.get(link_id)
        if link is None or link.exhausted:
            return False
        self._links[link_id] = link.model_copy(update={"claims_count": link.claims_count + 1})
        return True

    async def release_use(self, link_id: str) -> None:
        link = self._links.get(link_id)
        if link is not None and link.claims_count > 0:
            self._links[link_id] = link.model_copy(update={"claims_count": link.claims_count - 1})

    async def insert_claim(self, link_id: str, user_id: str) -> bool:
        key = (link_id, user_id)
        if key in self._claims:
            return False
        self._claims[key] = AdminLinkClaim(link_id=link_id, user_id=user_id)
        return True


class InMemoryRoleStore:
    def __init__(self) -> None:
        self._roles: Set[Tuple[str, str]] = set()

    async def has_role(self, user_id: str, role: str) -> bool:
        return (user_id, role) in self._roles

    async def grant_role(self, user_id: str, role: str) -> None:
        self._roles.add((user_id, role))


class InMemoryStoryProgressStore:
    def __init__(self) -> None:
        self._store: Dict[str, StoryProgress] = {}

    async def get(self, user_id: str) -> Optional[StoryProgress]:
        return self._store.get(user_id)

    async def save(self, progress: StoryProgress) -> StoryProgress:
        self._store[progress.id] = progress
        return progress


def build_memory_stores() -> Stores:
    return Stores(
        profiles=InMemoryProfileStore(),
        catalog=InMemoryCatalogStore(),
        inventory=InMemoryInventoryStore(),
        history=InMemoryHistoryStore(),
        trade_links=InMemoryTradeLinkStore(),
        admin_links=InMemoryAdminLinkStore(),
        roles=InMemoryRoleStore(),
        story=InMemoryStoryProgressStore(),
    )
