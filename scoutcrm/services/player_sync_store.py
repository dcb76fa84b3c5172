"""Database access for the external sync path.

The sync orchestrator talks to the database only through ``PlayerSyncStore``
so it can be driven by a fake in unit tests. ``SqlPlayerSyncStore`` is the
production implementation; it commits after each write so every player's
state transition stands on its own.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Literal, Protocol

from fastapi import Depends
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from scoutcrm.schemas.external_profiles import ExternalProfile
from scoutcrm.schemas.players import Player, SyncStatus
from scoutcrm.schemas.tm_players_cache import TmPlayerCache
from scoutcrm.utils.db_async import get_session

logger = logging.getLogger(__name__)

SyncScope = Literal["missing", "all"]

# Player columns the reconciler may fill from an external profile
RECONCILED_FIELDS = (
    "transfermarkt_url",
    "image_url",
    "main_position",
    "dominant_foot",
    "height_cm",
    "country_of_birth",
    "current_club_name",
    "current_club_country",
    "contract_until",
    "date_of_birth",
)


class PlayerUpdateError(RuntimeError):
    """A write to the players table (or its side tables) failed."""


@dataclass(frozen=True)
class SyncTarget:
    """Detached view of a player row, safe to hold across commits/rollbacks."""

    id: uuid.UUID
    full_name: str
    date_of_birth: date | None = None
    transfermarkt_player_id: str | None = None
    stored: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_player(cls, player: Player) -> SyncTarget:
        return cls(
            id=player.id,
            full_name=player.full_name,
            date_of_birth=player.date_of_birth,
            transfermarkt_player_id=player.transfermarkt_player_id,
            stored={name: getattr(player, name) for name in RECONCILED_FIELDS},
        )


class PlayerSyncStore(Protocol):
    async def get_target(self, player_id: uuid.UUID) -> SyncTarget | None: ...

    async def list_targets(self, scope: SyncScope) -> list[SyncTarget]: ...

    async def find_player_id_by_external_id(self, external_id: str) -> uuid.UUID | None: ...

    async def mark_status(
        self, player_id: uuid.UUID, status: SyncStatus, error: str | None = None
    ) -> None: ...

    async def apply_patch(self, player_id: uuid.UUID, values: dict[str, Any]) -> None: ...

    async def insert_player(self, values: dict[str, Any]) -> uuid.UUID: ...

    async def insert_snapshot(
        self,
        player_id: uuid.UUID,
        *,
        external_id: str | None,
        profile_url: str | None,
        raw: Any,
        source: str = "transfermarkt",
    ) -> None: ...

    async def upsert_cache(self, external_id: str, profile: Any, market_value: Any) -> None: ...


class SqlPlayerSyncStore:
    """PlayerSyncStore backed by an AsyncSession."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise PlayerUpdateError(str(exc)) from exc

    async def get_target(self, player_id: uuid.UUID) -> SyncTarget | None:
        result = await self.db.execute(
            select(Player)
            .where(Player.id == player_id)  # type: ignore[arg-type]
            .execution_options(populate_existing=True)
        )
        player = result.scalar_one_or_none()
        return SyncTarget.from_player(player) if player is not None else None

    async def list_targets(self, scope: SyncScope) -> list[SyncTarget]:
        query = select(Player).order_by(Player.created_at.desc())  # type: ignore[attr-defined]
        if scope == "missing":
            query = query.where(
                Player.transfermarkt_player_id.is_(None)  # type: ignore[union-attr]
            )
        result = await self.db.execute(query)
        return [SyncTarget.from_player(p) for p in result.scalars().all()]

    async def find_player_id_by_external_id(self, external_id: str) -> uuid.UUID | None:
        result = await self.db.execute(
            select(Player.id).where(  # type: ignore[call-overload]
                Player.transfermarkt_player_id == external_id
            )
        )
        return result.scalar_one_or_none()

    async def mark_status(
        self, player_id: uuid.UUID, status: SyncStatus, error: str | None = None
    ) -> None:
        now = datetime.utcnow()
        try:
            await self.db.execute(
                update(Player)
                .where(Player.id == player_id)  # type: ignore[arg-type]
                .values(
                    tm_sync_status=status,
                    tm_sync_error=error,
                    last_synced_at=now,
                    updated_at=now,
                )
            )
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise PlayerUpdateError(str(exc)) from exc
        await self._commit()

    async def apply_patch(self, player_id: uuid.UUID, values: dict[str, Any]) -> None:
        try:
            result = await self.db.execute(
                update(Player)
                .where(Player.id == player_id)  # type: ignore[arg-type]
                .values(**values, updated_at=datetime.utcnow())
            )
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise PlayerUpdateError(str(exc)) from exc
        if result.rowcount == 0:  # type: ignore[attr-defined]
            await self.db.rollback()
            raise PlayerUpdateError("player_not_found")
        await self._commit()

    async def insert_player(self, values: dict[str, Any]) -> uuid.UUID:
        player = Player(**values)
        self.db.add(player)
        await self._commit()
        logger.info(f"Inserted player {player.full_name} ({player.id})")
        return player.id

    async def insert_snapshot(
        self,
        player_id: uuid.UUID,
        *,
        external_id: str | None,
        profile_url: str | None,
        raw: Any,
        source: str = "transfermarkt",
    ) -> None:
        self.db.add(
            ExternalProfile(
                player_id=player_id,
                source=source,
                external_id=external_id,
                profile_url=profile_url,
                raw=raw,
            )
        )
        await self._commit()

    async def upsert_cache(self, external_id: str, profile: Any, market_value: Any) -> None:
        try:
            await self.db.merge(
                TmPlayerCache(
                    transfermarkt_player_id=external_id,
                    profile=profile,
                    market_value=market_value,
                    cached_at=datetime.utcnow(),
                )
            )
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise PlayerUpdateError(str(exc)) from exc
        await self._commit()


def get_player_sync_store(db: AsyncSession = Depends(get_session)) -> PlayerSyncStore:
    """FastAPI dependency wrapping the request session in a sync store."""
    return SqlPlayerSyncStore(db)
