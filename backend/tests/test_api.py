"""Tests for the HTTP surface."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from nail_arena.repositories import Stores

from conftest import auth_headers, give_nail

ALICE = auth_headers("alice")
BOB = auth_headers("bob")


class TestHealth:
    @pytest.mark.asyncio
    async def test_healthcheck(self, client: AsyncClient):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestAuth:
    @pytest.mark.asyncio
    async def test_missing_token(self, client: AsyncClient):
        response = await client.get("/api/profile")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token(self, client: AsyncClient):
        response = await client.get("/api/profile", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401


class TestProfileAndCases:
    @pytest.mark.asyncio
    async def test_profile_is_created_lazily(self, client: AsyncClient):
        response = await client.get("/api/profile", headers=ALICE)
        assert response.status_code == 200
        assert response.json() == {"soul": 100, "dream_points": 0, "masks": 3, "coins": 0}

    @pytest.mark.asyncio
    async def test_catalog_and_cases(self, client: AsyncClient):
        catalog = (await client.get("/api/catalog")).json()
        assert [nail["order_index"] for nail in catalog] == [1, 2, 3, 4, 5, 6, 7]

        cases = {case["tier"]: case for case in (await client.get("/api/cases")).json()}
        assert set(cases) == {"basic", "legendary", "plain"}
        assert cases["basic"]["cost"] == 50
        assert sum(cases["basic"]["odds"].values()) == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_open_case_then_sell(self, client: AsyncClient):
        response = await client.post("/api/cases/basic/open", headers=ALICE)
        assert response.status_code == 201
        body = response.json()
        assert len(body["strip"]) == 50
        assert body["strip"][body["winner_index"]]["nail_id"] == body["owned"]["nail"]["id"]
        assert body["profile"]["soul"] == 50

        inventory = (await client.get("/api/inventory", headers=ALICE)).json()
        assert [item["id"] for item in inventory] == [body["owned"]["id"]]

        sale = await client.post(f"/api/inventory/{body['owned']['id']}/sell", headers=ALICE)
        assert sale.status_code == 200
        assert sale.json()["credited"] == body["owned"]["sell_price"]

        again = await client.post(f"/api/inventory/{body['owned']['id']}/sell", headers=ALICE)
        assert again.status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_case_tier(self, client: AsyncClient):
        response = await client.post("/api/cases/mythic/open", headers=ALICE)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_case_without_funds(self, client: AsyncClient):
        response = await client.post("/api/cases/legendary/open", headers=ALICE)
        assert response.status_code == 400
        assert response.json() == {"detail": "Not enough soul"}

    @pytest.mark.asyncio
    async def test_delete_nail(self, client: AsyncClient, stores: Stores):
        owned = await give_nail(stores, "alice")
        response = await client.delete(f"/api/inventory/{owned.id}", headers=ALICE)
        assert response.status_code == 204
        assert await stores.inventory.get_owned(owned.id) is None


class TestShop:
    @pytest.mark.asyncio
    async def test_buy_masks(self, client: AsyncClient):
        response = await client.post("/api/shop/masks", json={"quantity": 2}, headers=ALICE)
        assert response.status_code == 200
        assert response.json()["masks"] == 5

    @pytest.mark.asyncio
    async def test_convert(self, client: AsyncClient):
        response = await client.post(
            "/api/shop/convert",
            json={"from_currency": "soul", "to_currency": "coins", "amount": 50},
            headers=ALICE,
        )
        assert response.status_code == 200
        assert response.json()["credited"] == 5

    @pytest.mark.asyncio
    async def test_forfeit_without_dream_points(self, client: AsyncClient):
        response = await client.post("/api/shop/forfeit-dream-point", headers=ALICE)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_redeem_unknown_code(self, client: AsyncClient):
        response = await client.post("/api/shop/redeem", json={"code": "missing"}, headers=ALICE)
        assert response.status_code == 404
        assert response.json() == {"detail": "Code not found"}


class TestAdminLinks:
    @pytest.mark.asyncio
    async def test_non_admin_is_forbidden(self, client: AsyncClient):
        response = await client.post("/api/admin/links", json={"soul_amount": 10}, headers=ALICE)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_link_round_trip(self, client: AsyncClient, stores: Stores):
        await stores.roles.grant_role("alice", "admin")
        created = await client.post(
            "/api/admin/links",
            json={"soul_amount": 25, "dream_points_amount": 5, "uses_remaining": 1},
            headers=ALICE,
        )
        assert created.status_code == 201
        code = created.json()["code"]

        redeemed = await client.post("/api/shop/redeem", json={"code": code.lower()}, headers=BOB)
        assert redeemed.json()["soul"] == 125

        second = await client.post("/api/shop/redeem", json={"code": code}, headers=ALICE)
        assert second.status_code == 409

        links = (await client.get("/api/admin/links", headers=ALICE)).json()
        assert links[0]["claims"] == 1


class TestTrades:
    @pytest.mark.asyncio
    async def test_trade_flow(self, client: AsyncClient, stores: Stores):
        owned = await give_nail(stores, "alice", "kingsmould_nail")
        created = await client.post("/api/trades", json={"owned_nail_id": owned.id}, headers=ALICE)
        assert created.status_code == 201
        code = created.json()["code"]

        preview = await client.get(f"/api/trades/{code}", headers=BOB)
        assert preview.json()["nail"]["id"] == "kingsmould_nail"
        assert preview.json()["claimed"] is False

        own = await client.post(f"/api/trades/{code}/claim", headers=ALICE)
        assert own.status_code == 400

        claimed = await client.post(f"/api/trades/{code}/claim", headers=BOB)
        assert claimed.status_code == 200
        assert claimed.json()["nail"]["id"] == "kingsmould_nail"

        again = await client.post(f"/api/trades/{code}/claim", headers=auth_headers("carol"))
        assert again.status_code == 409


class TestBattles:
    @pytest.mark.asyncio
    async def test_reference_tables(self, client: AsyncClient):
        presets = (await client.get("/api/battles/difficulties")).json()
        assert [preset["health"] for preset in presets] == [80, 100, 130, 170, 220]

        state = (await client.get("/api/battles/modifiers/4")).json()
        assert state["modifiers"] == ["Fast", "Reverse", "Pulse", "Blur"]

    @pytest.mark.asyncio
    async def test_battle_flow(self, client: AsyncClient, stores: Stores):
        owned = await give_nail(stores, "alice", "pure_nail")
        started = await client.post(
            "/api/battles", json={"owned_nail_id": owned.id, "difficulty": 1}, headers=ALICE
        )
        assert started.status_code == 201
        assert started.json()["enemy_health"] == 80
        assert started.json()["perfect_zone"] == [45, 55]

        current = await client.get("/api/battles/current", headers=ALICE)
        assert current.json()["id"] == started.json()["id"]

        attack = await client.post("/api/battles/current/attack", headers=ALICE)
        assert attack.status_code == 200
        assert attack.json()["accepted"] is True
        assert attack.json()["turn"]["damage_dealt"] > 0

        profile = (await client.get("/api/profile", headers=ALICE)).json()
        assert profile["masks"] == 2

    @pytest.mark.asyncio
    async def test_abandon_current_battle(self, client: AsyncClient, stores: Stores):
        owned = await give_nail(stores, "alice")
        await client.post("/api/battles", json={"owned_nail_id": owned.id, "difficulty": 1}, headers=ALICE)

        response = await client.delete("/api/battles/current", headers=ALICE)
        assert response.status_code == 200
        assert response.json()["phase"] == "defeat"

        assert (await client.get("/api/battles/current", headers=ALICE)).status_code == 404
        history = (await client.get("/api/battles/history", headers=ALICE)).json()
        assert [entry["won"] for entry in history] == [False]
        assert (await client.delete("/api/battles/current", headers=ALICE)).status_code == 404

    @pytest.mark.asyncio
    async def test_no_current_battle(self, client: AsyncClient):
        assert (await client.get("/api/battles/current", headers=ALICE)).status_code == 404
        assert (await client.post("/api/battles/current/attack", headers=ALICE)).status_code == 404

    @pytest.mark.asyncio
    async def test_history_is_empty_for_new_player(self, client: AsyncClient):
        response = await client.get("/api/battles/history", headers=ALICE)
        assert response.status_code == 200
        assert response.json() == []


class TestStory:
    @pytest.mark.asyncio
    async def test_story_navigation(self, client: AsyncClient):
        view = (await client.get("/api/story", headers=ALICE)).json()
        assert view["location"]["id"] == "awakening"

        moved = await client.post("/api/story/choose", json={"index": 0}, headers=ALICE)
        assert moved.status_code == 200
        assert moved.json()["progress"]["current_location"] == "crossroads"
        assert moved.json()["battle"] is None

        reset = await client.post("/api/story/reset", headers=ALICE)
        assert reset.json()["location"]["id"] == "awakening"

    @pytest.mark.asyncio
    async def test_story_battle_starts(self, client: AsyncClient, stores: Stores):
        owned = await give_nail(stores, "alice")
        await client.post("/api/story/choose", json={"index": 0}, headers=ALICE)
        response = await client.post(
            "/api/story/choose", json={"index": 2, "owned_nail_id": owned.id}, headers=ALICE
        )
        assert response.status_code == 200
        assert response.json()["battle"]["boss_id"] == "false_knight"
