from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, FrozenSet, List, Optional, Set

from ..config import Settings, settings
from ..errors import ConflictError, NotFoundError, TransientStoreError, ValidationError
from ..models import CombatHistoryRecord
from ..repositories import Stores
from .abilities import Ability, parse_abilities
from .combat import BattleSession, CombatRules, TurnOutcome
from .difficulty import get_battle_state, get_preset
from .economy import EconomyService
from .timing import TimingDriver

logger = logging.getLogger(__name__)

FinishListener = Callable[[BattleSession], Awaitable[None]]


@dataclass
class ActiveBattle:
    session: BattleSession
    driver: TimingDriver
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    on_finish: Optional[FinishListener] = None


class BattleService:
    """Owns the running battle of each player and settles it when it ends."""

    def __init__(
        self,
        stores: Stores,
        economy: EconomyService,
        rng: random.Random | None = None,
        config: Settings | None = None,
    ) -> None:
        self.stores = stores
        self.economy = economy
        self.rng = rng or random.SystemRandom()
        self.config = config or settings
        self.rules = CombatRules.from_settings(self.config)
        self._battles: Dict[str, ActiveBattle] = {}
        self._starting: Set[str] = set()

    async def unlocked_abilities(self, user_id: str) -> FrozenSet[Ability]:
        progress = await self.stores.story.get(user_id)
        return parse_abilities(progress.unlocked_abilities) if progress else frozenset()

    async def start_battle(
        self,
        user_id: str,
        owned_nail_id: str,
        difficulty: int,
        is_dream: bool = False,
        modifier_level: Optional[int] = None,
        *,
        boss_id: Optional[str] = None,
        soul_bonus: int = 0,
        on_finish: Optional[FinishListener] = None,
    ) -> BattleSession:
        preset = get_preset(difficulty)
        if user_id in self._battles or user_id in self._starting:
            raise ConflictError("A battle is already in progress")

        self._starting.add(user_id)
        try:
            owned = await self.economy.get_owned_view(user_id, owned_nail_id)
            if is_dream and not owned.is_dream:
                raise ValidationError("Dream battles require a dream nail")

            await self.economy.get_or_create_profile(user_id)
            await self.stores.profiles.apply_delta(user_id, {"masks": -1})

            session = BattleSession(
                user_id=user_id,
                owned_nail_id=owned.id,
                nail=owned.nail,
                preset=preset,
                is_dream=is_dream,
                boss_id=boss_id,
                abilities=await self.unlocked_abilities(user_id),
                modifiers=get_battle_state(modifier_level) if modifier_level is not None else None,
                soul_bonus=soul_bonus,
                rules=self.rules,
                rng=self.rng,
            )
            battle = ActiveBattle(
                session=session,
                driver=TimingDriver(session, self.config.tick_interval_ms),
                on_finish=on_finish,
            )
            self._battles[user_id] = battle
        finally:
            self._starting.discard(user_id)

        battle.driver.start()
        logger.info(
            "User %s started battle %s (level=%s, dream=%s, boss=%s)",
            user_id,
            session.id,
            difficulty,
            is_dream,
            boss_id,
        )
        return session

    def get_current(self, user_id: str) -> Optional[BattleSession]:
        battle = self._battles.get(user_id)
        return battle.session if battle else None

    async def attack(self, user_id: str, bar_value: float | None = None) -> Optional[TurnOutcome]:
        """Resolve an attack for the player's battle.

        Returns None while a previous attack is still resolving or the bar is
        not running.
        """

        battle = self._battles.get(user_id)
        if battle is None:
            raise NotFoundError("No battle in progress")
        if battle.lock.locked():
            return None

        async with battle.lock:
            session = battle.session
            if not session.timing_active:
                return None
            await battle.driver.stop()
            outcome = session.attack(bar_value)
            if session.finished:
                await self._finalize(battle)
            else:
                battle.driver.start()
            return outcome

    async def abandon(self, user_id: str) -> BattleSession:
        """Leave the current battle. It is recorded as a loss and the mask is kept spent."""

        battle = self._battles.get(user_id)
        if battle is None:
            raise NotFoundError("No battle in progress")

        async with battle.lock:
            if self._battles.get(user_id) is not battle:
                raise NotFoundError("No battle in progress")
            await battle.driver.stop()
            battle.session.forfeit()
            logger.info("User %s abandoned battle %s", user_id, battle.session.id)
            await self._finalize(battle)
        return battle.session

    async def _finalize(self, battle: ActiveBattle) -> None:
        session = battle.session
        self._battles.pop(session.user_id, None)
        await battle.driver.stop()

        rewards = session.rewards
        record = CombatHistoryRecord(
            user_id=session.user_id,
            nail_id=session.nail.id,
            won=session.won,
            is_dream=session.is_dream,
            soul_gained=rewards.soul if rewards else 0,
            dream_points_gained=rewards.dream_points if rewards else 0,
        )
        try:
            if session.won and rewards is not None:
                await self.stores.profiles.apply_delta(
                    session.user_id, {"soul": rewards.soul, "dream_points": rewards.dream_points}
                )
            await self.stores.history.append_combat_record(record)
        except Exception as exc:
            logger.exception("Failed to settle battle %s for user %s", session.id, session.user_id)
            raise TransientStoreError("Battle result could not be saved") from exc

        logger.info(
            "Battle %s ended: %s (soul=%s, dream_points=%s)",
            session.id,
            session.phase.value,
            record.soul_gained,
            record.dream_points_gained,
        )
        if battle.on_finish is not None:
            await battle.on_finish(session)

    async def list_history(self, user_id: str, limit: int = 50) -> List[CombatHistoryRecord]:
        return await self.stores.history.list_combat_records(user_id, limit=limit)

    async def shutdown(self) -> None:
        for battle in list(self._battles.values()):
            await battle.driver.stop()
        self._battles.clear()
