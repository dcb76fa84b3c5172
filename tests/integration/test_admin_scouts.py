"""Integration tests for admin scout management."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scoutcrm.schemas.auth import AuthSession
from scoutcrm.schemas.player_follows import PlayerFollow
from scoutcrm.schemas.players import Player
from tests.integration.auth_helpers import create_auth_user, login

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct horse battery staple"


@pytest_asyncio.fixture
async def admin_client(app_client: AsyncClient, db_session: AsyncSession) -> AsyncClient:
    """App client logged in as an admin."""
    await create_auth_user(
        db_session, email=ADMIN_EMAIL, role="admin", password=ADMIN_PASSWORD
    )
    response = await login(app_client, email=ADMIN_EMAIL, password=ADMIN_PASSWORD)
    assert response.status_code == 200
    return app_client


@pytest.mark.asyncio
class TestCreateScout:
    """POST /api/admin/scouts."""

    async def test_create_scout(self, admin_client: AsyncClient):
        response = await admin_client.post(
            "/api/admin/scouts",
            json={
                "email": " New.Scout@Example.com ",
                "password": "long enough",
                "full_name": "New Scout",
                "country": "  ",
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "new.scout@example.com"
        assert body["role"] == "scout"
        assert body["is_active"] is True
        assert body["country"] is None

        # the new account can sign in
        login_response = await login(
            admin_client, email="new.scout@example.com", password="long enough"
        )
        assert login_response.status_code == 200

    async def test_duplicate_email_conflicts(self, admin_client: AsyncClient):
        response = await admin_client.post(
            "/api/admin/scouts",
            json={"email": ADMIN_EMAIL.upper(), "password": "long enough"},
        )
        assert response.status_code == 409

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "no-at-sign", "password": "long enough"},
            {"email": "short@example.com", "password": "short"},
            {"email": "role@example.com", "password": "long enough", "role": "owner"},
        ],
    )
    async def test_invalid_input_is_400(self, admin_client: AsyncClient, payload):
        response = await admin_client.post("/api/admin/scouts", json=payload)
        assert response.status_code == 400


@pytest.mark.asyncio
class TestListScouts:
    """GET /api/admin/scouts."""

    async def test_follow_counts_and_filters(
        self, admin_client: AsyncClient, db_session: AsyncSession
    ):
        scout_id = await create_auth_user(
            db_session, email="busy@example.com", role="scout", password="long enough"
        )
        await create_auth_user(
            db_session, email="idle@example.com", role="scout", password="long enough"
        )
        players = [Player(full_name=f"Prospect {i}") for i in range(2)]
        db_session.add_all(players)
        await db_session.flush()
        db_session.add_all(
            [PlayerFollow(player_id=p.id, scout_id=scout_id) for p in players]
        )
        await db_session.commit()

        response = await admin_client.get("/api/admin/scouts", params={"role": "scout"})

        assert response.status_code == 200
        counts = {row["email"]: row["follow_count"] for row in response.json()}
        assert counts == {"busy@example.com": 2, "idle@example.com": 0}

        searched = await admin_client.get("/api/admin/scouts", params={"q": "BUSY"})
        assert [row["email"] for row in searched.json()] == ["busy@example.com"]


@pytest.mark.asyncio
class TestRoleAndActivation:
    """POST /api/admin/scouts/set-role and /toggle-active."""

    async def test_promote_scout(self, admin_client: AsyncClient, db_session: AsyncSession):
        scout_id = await create_auth_user(
            db_session, email="rising@example.com", role="scout", password="long enough"
        )

        response = await admin_client.post(
            "/api/admin/scouts/set-role", json={"scout_id": scout_id, "role": "admin"}
        )

        assert response.status_code == 200
        assert response.json()["role"] == "admin"

    async def test_unknown_scout_is_404(self, admin_client: AsyncClient):
        response = await admin_client.post(
            "/api/admin/scouts/set-role", json={"scout_id": 999_999, "role": "scout"}
        )
        assert response.status_code == 404

    async def test_deactivation_revokes_sessions(
        self,
        admin_client: AsyncClient,
        db_session: AsyncSession,
    ):
        scout_id = await create_auth_user(
            db_session, email="leaving@example.com", role="scout", password="long enough"
        )
        db_session.add(
            AuthSession(
                user_id=scout_id,
                token_hash=uuid.uuid4().hex,
                expires_at=datetime.utcnow() + timedelta(days=1),
            )
        )
        await db_session.commit()

        response = await admin_client.post(
            "/api/admin/scouts/toggle-active",
            json={"scout_id": scout_id, "is_active": False},
        )

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        sessions = (
            await db_session.execute(
                select(AuthSession)
                .where(AuthSession.user_id == scout_id)  # type: ignore[arg-type]
                .execution_options(populate_existing=True)
            )
        ).scalars().all()
        assert sessions and all(s.revoked_at is not None for s in sessions)
