"""Scout-facing player routes.

Routes are thin wrappers; business logic lives in player_service and
player_details_service.
"""

from __future__ import annotations

import uuid
from typing import Any, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from scoutcrm.models.players import PlayerListResponse, PlayerRead, PlayerWrite
from scoutcrm.schemas.auth import AuthUser
from scoutcrm.services import player_service
from scoutcrm.services.authz import get_current_user, get_current_user_id
from scoutcrm.services.player_details_service import (
    fetch_external_sections,
    get_cached_profile,
    parse_external_id_from_url,
)
from scoutcrm.services.transfermarkt_client import (
    PLAYER_SECTIONS,
    TransfermarktClient,
    get_transfermarkt_client,
)
from scoutcrm.utils.db_async import get_session

router = APIRouter(prefix="/api", tags=["players"])

DEFAULT_LIMIT = 25
MAX_LIMIT = 100


def _raise_for_value_error(exc: ValueError) -> NoReturn:
    if str(exc) == "player_not_found":
        raise HTTPException(status_code=404, detail="Player not found") from exc
    raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/players", response_model=PlayerListResponse)
async def list_players(
    q: str | None = Query(default=None),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    offset: int = Query(default=0, ge=0),
    _user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> PlayerListResponse:
    """List or search players by name or club, newest first."""
    result = await player_service.list_players(db, q=q, limit=limit, offset=offset)
    return PlayerListResponse(
        items=[PlayerRead.model_validate(p, from_attributes=True) for p in result.players],
        total=result.total,
        limit=limit,
        offset=offset,
    )


@router.post("/players", response_model=PlayerRead, status_code=201)
async def create_player(
    body: PlayerWrite,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Any:
    try:
        return await player_service.create_player(
            db, body.model_dump(exclude_unset=True), created_by=user.id
        )
    except ValueError as exc:
        _raise_for_value_error(exc)


@router.get("/players/{player_id}", response_model=PlayerRead)
async def get_player(
    player_id: uuid.UUID,
    _user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Any:
    player = await player_service.get_player_by_id(db, player_id)
    if player is None:
        raise HTTPException(status_code=404, detail="Player not found")
    return player


@router.put("/players/{player_id}", response_model=PlayerRead)
async def update_player(
    player_id: uuid.UUID,
    body: PlayerWrite,
    _user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Any:
    """Update allow-listed fields; omitted fields are left untouched."""
    try:
        return await player_service.update_player(
            db, player_id, body.model_dump(exclude_unset=True)
        )
    except ValueError as exc:
        _raise_for_value_error(exc)


@router.delete("/players/{player_id}", status_code=204)
async def delete_player(
    player_id: uuid.UUID,
    _user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Response:
    try:
        await player_service.delete_player(db, player_id)
    except ValueError as exc:
        _raise_for_value_error(exc)
    return Response(status_code=204)


@router.post("/players/{player_id}/follow")
async def follow_player(
    player_id: uuid.UUID,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Add the player to the caller's shortlist (idempotent)."""
    try:
        await player_service.follow_player(db, player_id, user_id)
    except ValueError as exc:
        _raise_for_value_error(exc)
    return {"ok": True, "following": True}


@router.delete("/players/{player_id}/follow")
async def unfollow_player(
    player_id: uuid.UUID,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    await player_service.unfollow_player(db, player_id, user_id)
    return {"ok": True, "following": False}


@router.get("/me/players", response_model=list[PlayerRead])
async def my_players(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Any:
    """Players on the caller's shortlist, most recently followed first."""
    return await player_service.list_followed_players(db, user_id)


@router.get("/players/{player_id}/tm")
async def get_player_tm_cache(
    player_id: uuid.UUID,
    _user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Cached external profile for a linked player (``{}`` when not cached)."""
    player = await player_service.get_player_by_id(db, player_id)
    if player is None or not player.transfermarkt_player_id:
        raise HTTPException(status_code=404, detail="not_found")
    return await get_cached_profile(db, player.transfermarkt_player_id)


@router.get("/players/{player_id}/details")
async def get_player_details(
    player_id: uuid.UUID,
    _user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    client: TransfermarktClient = Depends(get_transfermarkt_client),
) -> dict[str, Any]:
    """Stored player plus live external sections.

    Sections that fail are None and their messages are listed under
    ``_errors``; the request itself still succeeds.
    """
    player = await player_service.get_player_by_id(db, player_id)
    if player is None:
        raise HTTPException(status_code=404, detail="Player not found")

    external_id = player.transfermarkt_player_id or parse_external_id_from_url(
        player.transfermarkt_url
    )
    body: dict[str, Any] = {
        "player": PlayerRead.model_validate(player, from_attributes=True).model_dump(
            mode="json"
        ),
        "tm_id": external_id,
    }
    if external_id is None:
        body.update(dict.fromkeys(PLAYER_SECTIONS))
        return body

    sections = await fetch_external_sections(client, external_id)
    body.update(sections.data)
    if sections.errors:
        body["_errors"] = sections.errors
    return body
