"""Player CRUD and shortlist (follow) operations for scouts.

Routes are thin wrappers around these functions. Writes copy only
allow-listed fields; sync bookkeeping and the external link are owned by the
sync path and never taken from request bodies.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any, Mapping

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scoutcrm.schemas.external_profiles import ExternalProfile
from scoutcrm.schemas.player_follows import PlayerFollow
from scoutcrm.schemas.players import Player

# Fields scouts may set through create/update
EDITABLE_FIELDS = (
    "full_name",
    "date_of_birth",
    "main_position",
    "alt_positions",
    "dominant_foot",
    "height_cm",
    "weight_kg",
    "country_of_birth",
    "current_club_name",
    "current_club_country",
    "contract_until",
    "agency",
    "opinion",
    "image_url",
    "transfermarkt_url",
)


@dataclass
class PlayerListResult:
    """Result of a paginated player list query."""

    players: list[Player]
    total: int


def _now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def pick_editable(body: Mapping[str, Any]) -> dict[str, Any]:
    """Copy allow-listed keys present in ``body``; everything else is dropped."""
    return {key: body[key] for key in EDITABLE_FIELDS if key in body}


def coerce_patch(patch: dict[str, Any]) -> dict[str, Any]:
    """Normalize raw JSON values: blank strings to None, ISO dates to ``date``.

    Raises:
        ValueError: when full_name is blank or date_of_birth is malformed.
    """
    cleaned: dict[str, Any] = {}
    for key, value in patch.items():
        if isinstance(value, str):
            value = value.strip() or None
        cleaned[key] = value

    if "full_name" in cleaned and not cleaned["full_name"]:
        raise ValueError("full_name is required")

    dob = cleaned.get("date_of_birth")
    if isinstance(dob, str):
        try:
            cleaned["date_of_birth"] = date.fromisoformat(dob)
        except ValueError:
            raise ValueError("Invalid date_of_birth format. Use YYYY-MM-DD.") from None
    return cleaned


async def list_players(
    db: AsyncSession,
    q: str | None,
    limit: int,
    offset: int,
) -> PlayerListResult:
    """List players newest first, optionally filtered by name or club."""
    query = select(Player).order_by(Player.created_at.desc())  # type: ignore[attr-defined]
    count_query = select(func.count()).select_from(Player)

    if q and q.strip():
        term = f"%{q.strip()}%"
        search_filter = or_(
            Player.full_name.ilike(term),  # type: ignore[attr-defined]
            Player.current_club_name.ilike(term),  # type: ignore[union-attr]
        )
        query = query.where(search_filter)
        count_query = count_query.where(search_filter)

    total = await db.scalar(count_query) or 0
    result = await db.execute(query.limit(limit).offset(offset))
    return PlayerListResult(players=list(result.scalars().all()), total=total)


async def get_player_by_id(db: AsyncSession, player_id: uuid.UUID) -> Player | None:
    result = await db.execute(
        select(Player)
        .where(Player.id == player_id)  # type: ignore[arg-type]
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_player(
    db: AsyncSession,
    body: Mapping[str, Any],
    created_by: int | None,
) -> Player:
    """Insert a player from allow-listed fields.

    Raises:
        ValueError: full_name missing or a field is malformed.
    """
    values = coerce_patch(pick_editable(body))
    if not values.get("full_name"):
        raise ValueError("full_name is required")

    player = Player(**values, created_by=created_by)
    db.add(player)
    await db.commit()
    await db.refresh(player)
    return player


async def update_player(
    db: AsyncSession,
    player_id: uuid.UUID,
    body: Mapping[str, Any],
) -> Player:
    """Apply allow-listed fields from ``body`` to an existing player.

    Raises:
        ValueError: "player_not_found", or a malformed field.
    """
    player = await get_player_by_id(db, player_id)
    if player is None:
        raise ValueError("player_not_found")

    values = coerce_patch(pick_editable(body))
    for key, value in values.items():
        setattr(player, key, value)
    player.updated_at = _now()

    await db.commit()
    await db.refresh(player)
    return player


async def delete_player(db: AsyncSession, player_id: uuid.UUID) -> None:
    """Delete a player with its shortlist links and stored snapshots.

    Raises:
        ValueError: "player_not_found".
    """
    player = await get_player_by_id(db, player_id)
    if player is None:
        raise ValueError("player_not_found")

    await db.execute(
        delete(PlayerFollow).where(
            PlayerFollow.player_id == player_id  # type: ignore[arg-type]
        )
    )
    await db.execute(
        delete(ExternalProfile).where(
            ExternalProfile.player_id == player_id  # type: ignore[arg-type]
        )
    )
    await db.delete(player)
    await db.commit()


async def follow_player(db: AsyncSession, player_id: uuid.UUID, scout_id: int) -> None:
    """Add a player to a scout's shortlist; following twice is a no-op.

    Raises:
        ValueError: "player_not_found".
    """
    if await get_player_by_id(db, player_id) is None:
        raise ValueError("player_not_found")

    existing = await db.get(PlayerFollow, (player_id, scout_id))
    if existing is not None:
        return

    db.add(PlayerFollow(player_id=player_id, scout_id=scout_id))
    try:
        await db.commit()
    except IntegrityError:
        # lost a race with a concurrent follow of the same player
        await db.rollback()


async def unfollow_player(db: AsyncSession, player_id: uuid.UUID, scout_id: int) -> None:
    await db.execute(
        delete(PlayerFollow).where(
            PlayerFollow.player_id == player_id,  # type: ignore[arg-type]
            PlayerFollow.scout_id == scout_id,  # type: ignore[arg-type]
        )
    )
    await db.commit()


async def list_followed_players(db: AsyncSession, scout_id: int) -> list[Player]:
    result = await db.execute(
        select(Player)
        .join(PlayerFollow, PlayerFollow.player_id == Player.id)  # type: ignore[arg-type]
        .where(PlayerFollow.scout_id == scout_id)  # type: ignore[arg-type]
        .order_by(PlayerFollow.created_at.desc())  # type: ignore[attr-defined]
    )
    return list(result.scalars().all())
