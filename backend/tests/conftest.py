"""Shared test fixtures."""

from __future__ import annotations

import random
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from nail_arena.main import app
from nail_arena.models import OwnedNail
from nail_arena.repositories import Stores, build_memory_stores
from nail_arena.security import create_access_token
from nail_arena.services import BattleService, EconomyService, StoryService
from nail_arena.state import GameServices, set_services_provider


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest_asyncio.fixture
async def stores() -> Stores:
    """In-memory stores with the default catalog seeded."""
    memory = build_memory_stores()
    await memory.catalog.seed_if_empty()
    return memory


@pytest.fixture
def economy(stores: Stores, rng: random.Random) -> EconomyService:
    return EconomyService(stores, rng=rng)


@pytest_asyncio.fixture
async def battles(stores: Stores, economy: EconomyService, rng: random.Random) -> AsyncGenerator[BattleService, None]:
    service = BattleService(stores, economy, rng=rng)
    yield service
    await service.shutdown()


@pytest.fixture
def story(stores: Stores, battles: BattleService) -> StoryService:
    return StoryService(stores, battles)


@pytest_asyncio.fixture
async def client(
    stores: Stores,
    economy: EconomyService,
    battles: BattleService,
    story: StoryService,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client wired to the fixture services."""
    services = GameServices(stores=stores, economy=economy, battles=battles, story=story)
    set_services_provider(lambda: services)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


async def give_nail(stores: Stores, user_id: str, nail_id: str = "channelled_nail", is_dream: bool = False) -> OwnedNail:
    return await stores.inventory.insert_owned(OwnedNail(nail_id=nail_id, user_id=user_id, is_dream=is_dream))


async def set_balances(economy: EconomyService, user_id: str, **balances: int) -> None:
    """Create the profile and move its balances to the given values."""
    profile = await economy.get_or_create_profile(user_id)
    deltas = {field: value - profile.balance(field) for field, value in balances.items()}
    await economy.stores.profiles.apply_delta(user_id, deltas)
