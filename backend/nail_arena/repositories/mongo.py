"""MongoDB-backed stores.

Balance changes use guarded ``$inc`` updates and claims use conditional
``find_one_and_update`` calls, so concurrent sessions cannot overwrite each
other's writes.
"""

from __future__ import annotations

import functools
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from ..data.nail_definitions import NAIL_DEFINITIONS
from ..errors import ConflictError, InsufficientFundsError, NotFoundError, TransientStoreError
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

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


def translate_errors(method: Callable[..., Awaitable[ResultT]]) -> Callable[..., Awaitable[ResultT]]:
    """Re-raise driver failures as ``TransientStoreError``."""

    @functools.wraps(method)
    async def wrapper(*args: Any, **kwargs: Any) -> ResultT:
        try:
            return await method(*args, **kwargs)
        except DuplicateKeyError:
            raise
        except PyMongoError as exc:
            logger.warning("MongoDB call %s failed: %s", method.__qualname__, exc)
            raise TransientStoreError("Storage is temporarily unavailable") from exc

    return wrapper


class MongoProfileStore:
    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        self._collection = database["profiles"]

    @translate_errors
    async def get(self, user_id: str) -> Optional[Profile]:
        document = await self._collection.find_one({"_id": user_id})
        if document is None:
            return None
        return Profile.from_mongo(document)

    @translate_errors
    async def create(self, profile: Profile) -> Profile:
        document = await self._collection.find_one_and_update(
            {"_id": profile.id},
            {"$setOnInsert": profile.to_mongo()},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return Profile.from_mongo(document)

    @translate_errors
    async def apply_delta(self, user_id: str, deltas: Mapping[str, int]) -> Profile:
        query: Dict[str, Any] = {"_id": user_id}
        for field, delta in deltas.items():
            if field not in BALANCE_FIELDS:
                raise ValueError(f"Unknown balance field '{field}'")
            if delta < 0:
                query[field] = {"$gte": -delta}

        document = await self._collection.find_one_and_update(
            query,
            {"$inc": dict(deltas)},
            return_document=ReturnDocument.AFTER,
        )
        if document is not None:
            return Profile.from_mongo(document)

        current = await self._collection.find_one({"_id": user_id})
        if current is None:
            raise NotFoundError("Profile not found")
        for field, delta in deltas.items():
            if int(current.get(field, 0)) + delta < 0:
                raise InsufficientFundsError(field)
        # The guard failed on a value that has since changed; report it as a funds miss.
        raise InsufficientFundsError(next(iter(deltas)))


class MongoCatalogStore:
    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        self._collection = database["nails"]

    @translate_errors
    async def seed_if_empty(self, *, definitions: Iterable[dict] | None = None) -> None:
        """Insert bundled nail definitions if the collection is empty."""

        if await self._collection.estimated_document_count() > 0:
            return

        source = definitions if definitions is not None else NAIL_DEFINITIONS
        docs = [NailDefinition(**entry).to_mongo() for entry in source]
        if docs:
            await self._collection.insert_many(docs)

    @translate_errors
    async def list_nails(self) -> List[NailDefinition]:
        cursor = self._collection.find().sort("order_index", ASCENDING)
        return [NailDefinition.from_mongo(doc) async for doc in cursor]

    @translate_errors
    async def get_nail(self, nail_id: str) -> Optional[NailDefinition]:
        document = await self._collection.find_one({"_id": nail_id})
        if document is None:
            return None
        return NailDefinition.from_mongo(document)


class MongoInventoryStore:
    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        self._collection = database["user_nails"]

    @translate_errors
    async def list_owned(self, user_id: str) -> List[OwnedNail]:
        cursor = self._collection.find({"user_id": user_id}).sort("acquired_at", DESCENDING)
        return [OwnedNail.from_mongo(doc) async for doc in cursor]

    @translate_errors
    async def get_owned(self, owned_id: str) -> Optional[OwnedNail]:
        document = await self._collection.find_one({"_id": owned_id})
        if document is None:
            return None
        return OwnedNail.from_mongo(document)

    @translate_errors
    async def insert_owned(self, owned: OwnedNail) -> OwnedNail:
        await self._collection.insert_one(owned.to_mongo())
        return owned

    @translate_errors
    async def delete_owned(self, owned_id: str, user_id: str) -> Optional[OwnedNail]:
        document = await self._collection.find_one_and_delete({"_id": owned_id, "user_id": user_id})
        if document is None:
            return None
        return OwnedNail.from_mongo(document)


class MongoHistoryStore:
    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        self._combat = database["combat_history"]
        self._deductions = database["dream_points_deductions"]

    @translate_errors
    async def append_combat_record(self, record: CombatHistoryRecord) -> None:
        await self._combat.insert_one(record.to_mongo())

    @translate_errors
    async def list_combat_records(self, user_id: str, limit: int = 50) -> List[CombatHistoryRecord]:
        cursor = self._combat.find({"user_id": user_id}).sort("created_at", DESCENDING).limit(limit)
        return [CombatHistoryRecord.from_mongo(doc) async for doc in cursor]

    @translate_errors
    async def append_deduction(self, deduction: DreamPointDeduction) -> None:
        await self._deductions.insert_one(deduction.to_mongo())

    @translate_errors
    async def list_deductions(self, user_id: str) -> List[DreamPointDeduction]:
        cursor = self._deductions.find({"user_id": user_id}).sort("created_at", ASCENDING)
        return [DreamPointDeduction.from_mongo(doc) async for doc in cursor]


class MongoTradeLinkStore:
    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        self._collection = database["trade_links"]

    @translate_errors
    async def create_link(self, link: TradeLink) -> TradeLink:
        try:
            await self._collection.insert_one(link.to_mongo())
        except DuplicateKeyError as exc:
            raise ConflictError("Trade code collision, please try again") from exc
        return link

    @translate_errors
    async def get_link_by_code(self, code: str) -> Optional[TradeLink]:
        document = await self._collection.find_one({"code": code})
        if document is None:
            return None
        return TradeLink.from_mongo(document)

    @translate_errors
    async def delete_link(self, link_id: str) -> None:
        await self._collection.delete_one({"_id": link_id})

    @translate_errors
    async def claim_link(self, code: str, user_id: str, claimed_at: datetime) -> Optional[TradeLink]:
        document = await self._collection.find_one_and_update(
            {"code": code, "claimed_by": None, "from_user_id": {"$ne": user_id}},
            {"$set": {"claimed_by": user_id, "claimed_at": claimed_at}},
            return_document=ReturnDocument.AFTER,
        )
        if document is None:
            return None
        return TradeLink.from_mongo(document)

    @translate_errors
    async def release_claim(self, link_id: str, user_id: str) -> bool:
        result = await self._collection.update_one(
            {"_id": link_id, "claimed_by": user_id},
            {"$set": {"claimed_by": None, "claimed_at": None}},
        )
        return result.modified_count > 0


class MongoAdminLinkStore:
    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        self._links = database["admin_links"]
        self._claims = database["admin_link_claims"]

    @translate_errors
    async def create_link(self, link: AdminLink) -> AdminLink:
        try:
            await self._links.insert_one(link.to_mongo())
        except DuplicateKeyError as exc:
            raise ConflictError("Admin code collision, please try again") from exc
        return link

    @translate_errors
    async def get_by_code(self, code: str) -> Optional[AdminLink]:
        document = await self._links.find_one({"code": code})
        if document is None:
            return None
        return AdminLink.from_mongo(document)

    @translate_errors
    async def list_by_creator(self, user_id: str) -> List[AdminLink]:
        cursor = self._links.find({"created_by": user_id}).sort("created_at", DESCENDING)
        return [AdminLink.from_mongo(doc) async for doc in cursor]

    @translate_errors
    async def count_claims(self, link_id: str) -> int:
        return await self._claims.count_documents({"link_id": link_id})

    @translate_errors
    async def has_claim(self, link_id: str, user_id: str) -> bool:
        return await self._claims.find_one({"link_id": link_id, "user_id": user_id}) is not None

    @translate_errors
    async def reserve_use(self, link_id: str) -> bool:
        document = await self._links.find_one_and_update(
            {
                "_id": link_id,
                "$expr": {
                    "$or": [
                        {"$eq": ["$uses_remaining", None]},
                        {"$lt": ["$claims_count", "$uses_remaining"]},
                    ]
                },
            },
            {"$inc": {"claims_count": 1}},
        )
        return document is not None

    @translate_errors
    async def release_use(self, link_id: str) -> None:
        await self._links.update_one(
            {"_id": link_id, "claims_count": {"$gt": 0}},
            {"$inc": {"claims_count": -1}},
        )

    @translate_errors
    async def insert_claim(self, link_id: str, user_id: str) -> bool:
        claim = AdminLinkClaim(link_id=link_id, user_id=user_id)
        try:
            await self._claims.insert_one(claim.to_mongo())
        except DuplicateKeyError:
            return False
        return True


class MongoRoleStore:
    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        self._collection = database["user_roles"]

    @translate_errors
    async def has_role(self, user_id: str, role: str) -> bool:
        return await self._collection.find_one({"user_id": user_id, "role": role}) is not None

    @translate_errors
    async def grant_role(self, user_id: str, role: str) -> None:
        await self._collection.update_one(
            {"user_id": user_id, "role": role},
            {"$setOnInsert": {"user_id": user_id, "role": role}},
            upsert=True,
        )


class MongoStoryProgressStore:
    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        self._collection = database["story_progress"]

    @translate_errors
    async def get(self, user_id: str) -> Optional[StoryProgress]:
        document = await self._collection.find_one({"_id": user_id})
        if document is None:
            return None
        return StoryProgress.from_mongo(document)

    @translate_errors
    async def save(self, progress: StoryProgress) -> StoryProgress:
        document = progress.to_mongo()
        await self._collection.replace_one({"_id": document["_id"]}, document, upsert=True)
        return progress


async def ensure_indexes(database: AsyncIOMotorDatabase) -> None:
    """Create the indexes the stores rely on for uniqueness and lookups."""

    await database["user_nails"].create_index("user_id", name="user_nails_user_idx")
    await database["trade_links"].create_index("code", unique=True, name="trade_links_code_idx")
    await database["admin_links"].create_index("code", unique=True, name="admin_links_code_idx")
    await database["admin_link_claims"].create_index(
        [("link_id", ASCENDING), ("user_id", ASCENDING)],
        unique=True,
        name="admin_link_claims_unique_idx",
    )
    await database["combat_history"].create_index(
        [("user_id", ASCENDING), ("created_at", DESCENDING)],
        name="combat_history_user_idx",
    )
    await database["user_roles"].create_index(
        [("user_id", ASCENDING), ("role", ASCENDING)],
        unique=True,
        name="user_roles_unique_idx",
    )


def build_mongo_stores(database: AsyncIOMotorDatabase) -> Stores:
    return Stores(
        profiles=MongoProfileStore(database),
        catalog=MongoCatalogStore(database),
        inventory=MongoInventoryStore(database),
        history=MongoHistoryStore(database),
        trade_links=MongoTradeLinkStore(database),
        admin_links=MongoAdminLinkStore(database),
        roles=MongoRoleStore(database),
        story=MongoStoryProgressStore(database),
    )
