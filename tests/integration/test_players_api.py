"""Integration tests for player CRUD and the scout shortlist."""

from __future__ import annotations

import uuid

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from scoutcrm.schemas.external_profiles import ExternalProfile
from scoutcrm.schemas.player_follows import PlayerFollow
from tests.integration.auth_helpers import create_auth_user, login

SCOUT_EMAIL = "scout@example.com"
SCOUT_PASSWORD = "offside trap 2024"


@pytest_asyncio.fixture
async def scout_client(app_client: AsyncClient, db_session: AsyncSession) -> AsyncClient:
    """App client logged in as a scout."""
    await create_auth_user(
        db_session, email=SCOUT_EMAIL, role="scout", password=SCOUT_PASSWORD
    )
    response = await login(app_client, email=SCOUT_EMAIL, password=SCOUT_PASSWORD)
    assert response.status_code == 200
    return app_client


async def _create(client: AsyncClient, **fields) -> dict:
    response = await client.post("/api/players", json=fields)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
class TestPlayerCrud:
    """Create, read, update and delete through /api/players."""

    async def test_create_and_fetch(self, scout_client: AsyncClient):
        created = await _create(
            scout_client,
            full_name="Lamine Yamal",
            date_of_birth="2007-07-13",
            current_club_name="FC Barcelona",
            tm_sync_status="ok",
        )

        assert created["date_of_birth"] == "2007-07-13"
        # bookkeeping fields are not client-writable
        assert created["tm_sync_status"] == "idle"
        assert created["created_by"] is not None

        fetched = await scout_client.get(f"/api/players/{created['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["full_name"] == "Lamine Yamal"

    async def test_create_requires_name(self, scout_client: AsyncClient):
        response = await scout_client.post("/api/players", json={"opinion": "quick"})
        assert response.status_code == 400

    async def test_bad_birth_date_is_400(self, scout_client: AsyncClient):
        response = await scout_client.post(
            "/api/players", json={"full_name": "X", "date_of_birth": "13/07/2007"}
        )
        assert response.status_code == 400
        assert "YYYY-MM-DD" in response.json()["detail"]

    async def test_list_search_and_paging(self, scout_client: AsyncClient):
        await _create(scout_client, full_name="Pedri", current_club_name="FC Barcelona")
        await _create(scout_client, full_name="Gavi", current_club_name="FC Barcelona")
        await _create(scout_client, full_name="Florian Wirtz", current_club_name="Leverkusen")

        everyone = await scout_client.get("/api/players")
        assert everyone.json()["total"] == 3
        # newest first
        assert everyone.json()["items"][0]["full_name"] == "Florian Wirtz"

        barca = await scout_client.get("/api/players", params={"q": "barcelona", "limit": 1})
        body = barca.json()
        assert body["total"] == 2
        assert len(body["items"]) == 1
        assert body["limit"] == 1

    async def test_update_leaves_omitted_fields(self, scout_client: AsyncClient):
        created = await _create(
            scout_client, full_name="Jamal Musiala", agency="Family", opinion="Dribbler"
        )

        response = await scout_client.put(
            f"/api/players/{created['id']}", json={"opinion": "Elite dribbler", "agency": ""}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["opinion"] == "Elite dribbler"
        assert body["agency"] is None
        assert body["full_name"] == "Jamal Musiala"

    async def test_update_unknown_player(self, scout_client: AsyncClient):
        response = await scout_client.put(f"/api/players/{uuid.uuid4()}", json={"opinion": "x"})
        assert response.status_code == 404

    async def test_delete_removes_follows_and_snapshots(
        self, scout_client: AsyncClient, db_session: AsyncSession
    ):
        created = await _create(scout_client, full_name="Arda Guler")
        player_id = uuid.UUID(created["id"])
        await scout_client.post(f"/api/players/{player_id}/follow")
        db_session.add(ExternalProfile(player_id=player_id, raw={"id": "1"}))
        await db_session.commit()

        response = await scout_client.delete(f"/api/players/{player_id}")

        assert response.status_code == 204
        assert (await scout_client.get(f"/api/players/{player_id}")).status_code == 404
        for model in (PlayerFollow, ExternalProfile):
            count = await db_session.scalar(
                select(func.count())
                .select_from(model)
                .where(model.player_id == player_id)  # type: ignore[attr-defined]
            )
            assert count == 0


@pytest.mark.asyncio
class TestShortlist:
    """Follow/unfollow and /api/me/players."""

    async def test_follow_is_idempotent(self, scout_client: AsyncClient):
        first = await _create(scout_client, full_name="Pau Cubarsi")
        second = await _create(scout_client, full_name="Dean Huijsen")

        for _ in range(2):
            response = await scout_client.post(f"/api/players/{first['id']}/follow")
            assert response.json() == {"ok": True, "following": True}
        await scout_client.post(f"/api/players/{second['id']}/follow")

        mine = await scout_client.get("/api/me/players")
        assert [p["full_name"] for p in mine.json()] == ["Dean Huijsen", "Pau Cubarsi"]

        response = await scout_client.delete(f"/api/players/{second['id']}/follow")
        assert response.json() == {"ok": True, "following": False}
        mine = await scout_client.get("/api/me/players")
        assert [p["full_name"] for p in mine.json()] == ["Pau Cubarsi"]

    async def test_follow_unknown_player(self, scout_client: AsyncClient):
        response = await scout_client.post(f"/api/players/{uuid.uuid4()}/follow")
        assert response.status_code == 404
