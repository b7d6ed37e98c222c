"""Currency, inventory and link transactions.

Every balance change is a single ``apply_delta`` call so that the store can
guard it atomically. Multi-step operations compensate their earlier steps
when a later one fails and surface :class:`TransientStoreError`.
"""

from __future__ import annotations

import logging
import random
import secrets
import string
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..config import Settings, settings
from ..errors import (
    ConfigurationError,
    ConflictError,
    GameError,
    NotFoundError,
    PermissionDeniedError,
    TransientStoreError,
    ValidationError,
)
from ..models import (
    AdminLink,
    DreamPointDeduction,
    NailDefinition,
    OwnedNail,
    OwnedNailView,
    Profile,
    TradeLink,
)
from ..models.base import utcnow
from ..repositories import Stores
from . import loot
from .loot import CaseTier, StripItem

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_ATTEMPTS = 3


def generate_code(length: int) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def normalize_code(code: str) -> str:
    return code.strip().upper()


@dataclass
class CaseOpening:
    owned: OwnedNailView
    strip: List[StripItem]
    winner_index: int
    profile: Profile


@dataclass
class SaleResult:
    credited: int
    currency: str
    profile: Profile


@dataclass
class ConversionResult:
    debited: int
    credited: int
    profile: Profile


@dataclass
class AdminLinkSummary:
    link: AdminLink
    claims: int


@dataclass
class TradePreview:
    link: TradeLink
    nail: NailDefinition


class EconomyService:
    def __init__(self, stores: Stores, rng: random.Random | None = None, config: Settings | None = None) -> None:
        self.stores = stores
        self.rng = rng or random.SystemRandom()
        self.config = config or settings

    # Profiles and catalog

    async def get_or_create_profile(self, user_id: str) -> Profile:
        profile = await self.stores.profiles.get(user_id)
        if profile is not None:
            return profile
        logger.info("Creating profile for user %s", user_id)
        return await self.stores.profiles.create(
            Profile(
                id=user_id,
                soul=self.config.starting_soul,
                dream_points=self.config.starting_dream_points,
                masks=self.config.starting_masks,
                coins=self.config.starting_coins,
            )
        )

    async def list_catalog(self) -> List[NailDefinition]:
        return await self.stores.catalog.list_nails()

    async def get_definition(self, nail_id: str) -> NailDefinition:
        nail = await self.stores.catalog.get_nail(nail_id)
        if nail is None:
            raise ConfigurationError(f"Nail definition '{nail_id}' is missing from the catalog")
        return nail

    async def list_inventory(self, user_id: str) -> List[OwnedNailView]:
        owned = await self.stores.inventory.list_owned(user_id)
        catalog = {nail.id: nail for nail in await self.stores.catalog.list_nails()}
        views = []
        for row in owned:
            nail = catalog.get(row.nail_id)
            if nail is None:
                logger.warning("Owned nail %s references unknown definition %s", row.id, row.nail_id)
                continue
            views.append(OwnedNailView(id=row.id, is_dream=row.is_dream, acquired_at=row.acquired_at, nail=nail))
        return views

    async def get_owned_view(self, user_id: str, owned_id: str) -> OwnedNailView:
        row = await self.stores.inventory.get_owned(owned_id)
        if row is None or row.user_id != user_id:
            raise NotFoundError("Nail not found in your inventory")
        nail = await self.get_definition(row.nail_id)
        return OwnedNailView(id=row.id, is_dream=row.is_dream, acquired_at=row.acquired_at, nail=nail)

    # Cases

    def case_cost(self, tier: CaseTier) -> int:
        try:
            return self.config.case_costs[tier.value]
        except KeyError:
            raise ConfigurationError(f"No price configured for the {tier.value} case") from None

    async def list_cases(self) -> List[Tuple[CaseTier, int, Dict[str, float]]]:
        catalog = await self.stores.catalog.list_nails()
        return [(tier, self.case_cost(tier), loot.odds(catalog, tier)) for tier in CaseTier]

    async def open_case(self, user_id: str, tier: CaseTier) -> CaseOpening:
        cost = self.case_cost(tier)
        pool = loot.tier_pool(await self.stores.catalog.list_nails(), tier)
        await self.get_or_create_profile(user_id)

        await self.stores.profiles.apply_delta(user_id, {"soul": -cost})
        try:
            winner, is_dream = loot.draw(pool, tier, self.rng)
            strip = loot.build_strip(pool, winner, is_dream, rng=self.rng)
            owned = await self.stores.inventory.insert_owned(
                OwnedNail(nail_id=winner.id, user_id=user_id, is_dream=is_dream)
            )
        except Exception as exc:
            logger.exception("Case opening failed for user %s; refunding %s soul", user_id, cost)
            await self.stores.profiles.apply_delta(user_id, {"soul": cost})
            if isinstance(exc, GameError) and not isinstance(exc, TransientStoreError):
                raise
            raise TransientStoreError("Could not open the case, your soul was refunded") from exc

        profile = await self.stores.profiles.get(user_id)
        logger.info("User %s opened a %s case and won %s (dream=%s)", user_id, tier.value, winner.id, is_dream)
        return CaseOpening(
            owned=OwnedNailView(id=owned.id, is_dream=owned.is_dream, acquired_at=owned.acquired_at, nail=winner),
            strip=strip,
            winner_index=loot.winner_index(len(strip), self.config.strip_winner_offset),
            profile=profile,
        )

    # Inventory

    async def sell_nail(self, user_id: str, owned_id: str) -> SaleResult:
        view = await self.get_owned_view(user_id, owned_id)
        removed = await self.stores.inventory.delete_owned(owned_id, user_id)
        if removed is None:
            raise NotFoundError("Nail not found in your inventory")

        price = view.sell_price
        try:
            profile = await self.stores.profiles.apply_delta(user_id, {"soul": price})
        except Exception as exc:
            logger.exception("Crediting sale of %s failed; restoring the nail", owned_id)
            await self.stores.inventory.insert_owned(removed)
            raise TransientStoreError("Could not complete the sale") from exc
        return SaleResult(credited=price, currency="soul", profile=profile)

    async def delete_nail(self, user_id: str, owned_id: str) -> None:
        removed = await self.stores.inventory.delete_owned(owned_id, user_id)
        if removed is None:
            raise NotFoundError("Nail not found in your inventory")

    # Shop

    def _conversion_rate(self, from_currency: str, to_currency: str) -> Tuple[int, bool]:
        """Return ``(rate, upgrading)`` for a configured pair."""

        if from_currency == to_currency:
            raise ValidationError("Cannot convert a currency into itself")
        rates = self.config.conversion_rates
        if f"{from_currency}:{to_currency}" in rates:
            return rates[f"{from_currency}:{to_currency}"], True
        if f"{to_currency}:{from_currency}" in rates:
            return rates[f"{to_currency}:{from_currency}"], False
        raise ValidationError(f"Conversion from {from_currency} to {to_currency} is not available")

    async def convert(self, user_id: str, from_currency: str, to_currency: str, amount: int) -> ConversionResult:
        if amount <= 0:
            raise ValidationError("Amount must be positive")
        rate, upgrading = self._conversion_rate(from_currency, to_currency)
        if rate <= 0:
            raise ConfigurationError(f"Invalid conversion rate for {from_currency}/{to_currency}")

        credited = amount // rate if upgrading else amount * rate
        if credited == 0:
            raise ValidationError(f"At least {rate} {from_currency.replace('_', ' ')} is needed for one unit")

        await self.get_or_create_profile(user_id)
        profile = await self.stores.profiles.apply_delta(user_id, {from_currency: -amount, to_currency: credited})
        # Only dream point debits are audited.
        if from_currency == "dream_points":
            await self._record_deduction(user_id, amount, "conversion")
        return ConversionResult(debited=amount, credited=credited, profile=profile)

    async def forfeit_dream_point(self, user_id: str) -> Profile:
        await self.get_or_create_profile(user_id)
        profile = await self.stores.profiles.apply_delta(user_id, {"dream_points": -1})
        await self._record_deduction(user_id, 1, "forfeit")
        return profile

    async def _record_deduction(self, user_id: str, amount: int, reason: str) -> None:
        """Append the audit row for a committed dream point debit.

        The balance change is already applied, so a failed write is logged for
        reconciliation and the operation still reports success.
        """

        try:
            await self.stores.history.append_deduction(
                DreamPointDeduction(user_id=user_id, amount=amount, reason=reason)
            )
        except TransientStoreError:
            logger.exception(
                "Failed to record a %s deduction of %s dream points for user %s", reason, amount, user_id
            )

    async def buy_masks(self, user_id: str, quantity: int) -> Profile:
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")
        await self.get_or_create_profile(user_id)
        cost = self.config.mask_cost * quantity
        return await self.stores.profiles.apply_delta(
            user_id, {self.config.mask_currency: -cost, "masks": quantity}
        )

    # Admin links

    async def is_admin(self, user_id: str) -> bool:
        return await self.stores.roles.has_role(user_id, ADMIN_ROLE)

    async def _require_admin(self, user_id: str) -> None:
        if not await self.is_admin(user_id):
            raise PermissionDeniedError("Admin privileges required")

    async def create_admin_link(
        self,
        user_id: str,
        soul_amount: int,
        dream_points_amount: int,
        uses_remaining: Optional[int] = None,
    ) -> AdminLink:
        await self._require_admin(user_id)
        if soul_amount < 0 or dream_points_amount < 0:
            raise ValidationError("Amounts cannot be negative")
        if soul_amount == 0 and dream_points_amount == 0:
            raise ValidationError("A link must grant something")
        if uses_remaining is not None and uses_remaining < 1:
            raise ValidationError("Uses must be at least 1, or unlimited")

        for attempt in range(CODE_ATTEMPTS):
            link = AdminLink(
                code=generate_code(self.config.admin_code_length),
                created_by=user_id,
                soul_amount=soul_amount,
                dream_points_amount=dream_points_amount,
                uses_remaining=uses_remaining,
            )
            if await self.stores.admin_links.get_by_code(link.code) is not None:
                continue
            try:
                created = await self.stores.admin_links.create_link(link)
            except ConflictError:
                if attempt == CODE_ATTEMPTS - 1:
                    raise
                continue
            logger.info("Admin %s created link %s", user_id, created.code)
            return created
        raise ConflictError("Could not allocate a unique code, please try again")

    async def list_admin_links(self, user_id: str) -> List[AdminLinkSummary]:
        await self._require_admin(user_id)
        links = await self.stores.admin_links.list_by_creator(user_id)
        return [AdminLinkSummary(link=link, claims=await self.stores.admin_links.count_claims(link.id)) for link in links]

    async def redeem_admin_code(self, user_id: str, code: str) -> Profile:
        normalized = normalize_code(code)
        if not normalized:
            raise ValidationError("Enter a code")
        link = await self.stores.admin_links.get_by_code(normalized)
        if link is None:
            raise NotFoundError("Code not found")
        if await self.stores.admin_links.has_claim(link.id, user_id):
            raise ConflictError("You have already redeemed this code")
        if not await self.stores.admin_links.reserve_use(link.id):
            raise ConflictError("This code has no uses left")
        if not await self.stores.admin_links.insert_claim(link.id, user_id):
            await self.stores.admin_links.release_use(link.id)
            logger.warning("Duplicate redemption of %s by user %s rejected", link.code, user_id)
            raise ConflictError("You have already redeemed this code")

        await self.get_or_create_profile(user_id)
        profile = await self.stores.profiles.apply_delta(
            user_id, {"soul": link.soul_amount, "dream_points": link.dream_points_amount}
        )
        logger.info("User %s redeemed admin code %s", user_id, link.code)
        return profile

    # Trades

    async def create_trade(self, user_id: str, owned_id: str) -> TradeLink:
        owned = await self.stores.inventory.get_owned(owned_id)
        if owned is None or owned.user_id != user_id:
            raise NotFoundError("Nail not found in your inventory")

        link = None
        for attempt in range(CODE_ATTEMPTS):
            candidate = TradeLink(
                code=generate_code(self.config.trade_code_length),
                from_user_id=user_id,
                user_nail_id=owned.id,
                nail_id=owned.nail_id,
                is_dream=owned.is_dream,
            )
            try:
                link = await self.stores.trade_links.create_link(candidate)
                break
            except ConflictError:
                if attempt == CODE_ATTEMPTS - 1:
                    raise

        removed = await self.stores.inventory.delete_owned(owned.id, user_id)
        if removed is None:
            await self.stores.trade_links.delete_link(link.id)
            logger.warning("Nail %s left the inventory before it could be offered", owned.id)
            raise ConflictError("This nail is no longer in your inventory")
        logger.info("User %s offered nail %s under code %s", user_id, owned.id, link.code)
        return link

    async def get_trade(self, code: str) -> TradePreview:
        link = await self.stores.trade_links.get_link_by_code(normalize_code(code))
        if link is None:
            raise NotFoundError("Trade link not found")
        return TradePreview(link=link, nail=await self.get_definition(link.nail_id))

    async def claim_trade(self, user_id: str, code: str) -> OwnedNailView:
        normalized = normalize_code(code)
        link = await self.stores.trade_links.claim_link(normalized, user_id, utcnow())
        if link is None:
            existing = await self.stores.trade_links.get_link_by_code(normalized)
            if existing is None:
                raise NotFoundError("Trade link not found")
            if existing.from_user_id == user_id:
                raise ValidationError("You cannot claim your own trade")
            raise ConflictError("This trade has already been claimed")

        try:
            owned = await self.stores.inventory.insert_owned(
                OwnedNail(nail_id=link.nail_id, user_id=user_id, is_dream=link.is_dream)
            )
        except Exception as exc:
            logger.exception("Delivering trade %s to user %s failed; releasing the claim", link.code, user_id)
            await self.stores.trade_links.release_claim(link.id, user_id)
            raise TransientStoreError("Could not deliver the nail, please try again") from exc

        logger.info("User %s claimed trade %s", user_id, link.code)
        nail = await self.get_definition(link.nail_id)
        return OwnedNailView(id=owned.id, is_dream=owned.is_dream, acquired_at=owned.acquired_at, nail=nail)
