"""Integration tests for SqlPlayerSyncStore and a full sync against Postgres."""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from scoutcrm.schemas.external_profiles import ExternalProfile
from scoutcrm.schemas.players import Player, SyncStatus
from scoutcrm.schemas.tm_players_cache import TmPlayerCache
from scoutcrm.services.player_sync_service import run_batch_sync, sync_player_by_id
from scoutcrm.services.player_sync_store import PlayerUpdateError, SqlPlayerSyncStore
from tests.unit.sync_fakes import FakeClient, recording_pacer


async def _add_players(db: AsyncSession, *players: Player) -> None:
    db.add_all(players)
    await db.commit()


async def _reload(db: AsyncSession, player: Player) -> Player:
    fresh = await db.get(Player, player.id, populate_existing=True)
    assert fresh is not None
    return fresh


@pytest.mark.asyncio
class TestSqlPlayerSyncStore:
    """Direct store operations."""

    async def test_scopes(self, db_session: AsyncSession):
        linked = Player(full_name="Linked", transfermarkt_player_id="1")
        unlinked = Player(full_name="Unlinked")
        await _add_players(db_session, linked, unlinked)
        store = SqlPlayerSyncStore(db_session)

        missing = await store.list_targets("missing")
        every = await store.list_targets("all")

        assert [t.full_name for t in missing] == ["Unlinked"]
        assert {t.full_name for t in every} == {"Linked", "Unlinked"}
        assert await store.find_player_id_by_external_id("1") == linked.id

    async def test_mark_status_stamps_sync_time(self, db_session: AsyncSession):
        player = Player(full_name="Someone")
        await _add_players(db_session, player)
        store = SqlPlayerSyncStore(db_session)

        await store.mark_status(player.id, SyncStatus.ERROR, error="TM search 500")

        fresh = await _reload(db_session, player)
        assert fresh.tm_sync_status == SyncStatus.ERROR
        assert fresh.tm_sync_error == "TM search 500"
        assert fresh.last_synced_at is not None

    async def test_patch_for_unknown_player_fails(self, db_session: AsyncSession):
        store = SqlPlayerSyncStore(db_session)
        with pytest.raises(PlayerUpdateError):
            await store.apply_patch(Player(full_name="ghost").id, {"agency": "x"})

    async def test_duplicate_external_id_is_update_error(self, db_session: AsyncSession):
        first = Player(full_name="First", transfermarkt_player_id="42")
        second = Player(full_name="Second")
        await _add_players(db_session, first, second)
        second_id = second.id
        store = SqlPlayerSyncStore(db_session)

        with pytest.raises(PlayerUpdateError):
            await store.apply_patch(second_id, {"transfermarkt_player_id": "42"})

        # the session is usable again after the failed write
        await store.mark_status(second_id, SyncStatus.ERROR, error="duplicate")

    async def test_cache_upsert_overwrites(self, db_session: AsyncSession):
        store = SqlPlayerSyncStore(db_session)

        await store.upsert_cache("7", {"name": "old"}, None)
        await store.upsert_cache("7", {"name": "new"}, {"marketValue": "€10m"})

        row = await db_session.get(TmPlayerCache, "7", populate_existing=True)
        assert row is not None
        assert row.profile == {"name": "new"}
        assert row.market_value == {"marketValue": "€10m"}


@pytest.mark.asyncio
class TestSyncAgainstDatabase:
    """The orchestrator driving the real store with a canned client."""

    async def test_single_sync_links_player(self, db_session: AsyncSession):
        player = Player(full_name="Pedri", date_of_birth=date(2002, 11, 25), agency="Own")
        await _add_players(db_session, player)
        client = FakeClient(
            search_results={"Pedri": [{"id": "683840", "name": "Pedri"}]},
            profiles={
                "683840": {
                    "id": "683840",
                    "name": "Pedri",
                    "url": "https://www.transfermarkt.com/pedri/profil/spieler/683840",
                    "club": {"name": "FC Barcelona"},
                    "position": {"main": "Central Midfield"},
                }
            },
        )
        pacer, _ = recording_pacer()

        outcome = await sync_player_by_id(
            SqlPlayerSyncStore(db_session), client, pacer, player.id
        )

        assert outcome.matched
        fresh = await _reload(db_session, player)
        assert fresh.transfermarkt_player_id == "683840"
        assert fresh.tm_sync_status == SyncStatus.OK
        assert fresh.tm_sync_error is None
        assert fresh.last_synced_at is not None
        assert fresh.current_club_name == "FC Barcelona"
        assert fresh.main_position == "CM"
        assert fresh.agency == "Own"
        snapshots = await db_session.scalar(
            select(func.count())
            .select_from(ExternalProfile)
            .where(ExternalProfile.player_id == player.id)  # type: ignore[arg-type]
        )
        assert snapshots == 1
        assert await db_session.get(TmPlayerCache, "683840") is not None

    async def test_batch_records_not_found(self, db_session: AsyncSession):
        player = Player(full_name="Unknown Youth")
        await _add_players(db_session, player)
        pacer, _ = recording_pacer()

        result = await run_batch_sync(
            SqlPlayerSyncStore(db_session), FakeClient(), pacer, scope="missing"
        )

        assert (result.scanned, result.not_found) == (1, 1)
        fresh = await _reload(db_session, player)
        assert fresh.tm_sync_status == SyncStatus.NOT_FOUND
        assert fresh.last_synced_at is not None
