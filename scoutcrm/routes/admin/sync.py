"""Admin routes that reconcile players against the external service."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from scoutcrm.models.players import PlayerRead
from scoutcrm.models.sync import (
    BatchSyncResponse,
    ImportRequest,
    ImportResponse,
    SyncResponse,
    TriggeredSyncResponse,
)
from scoutcrm.schemas.players import SyncStatus
from scoutcrm.services.player_import_service import (
    ImportValidationError,
    import_player,
)
from scoutcrm.services.player_service import get_player_by_id
from scoutcrm.services.player_sync_service import (
    SyncOutcome,
    run_batch_sync,
    sync_player_by_id,
)
from scoutcrm.services.player_sync_store import (
    PlayerSyncStore,
    PlayerUpdateError,
    SyncScope,
    get_player_sync_store,
)
from scoutcrm.services.request_pacer import RequestPacer, get_request_pacer
from scoutcrm.services.transfermarkt_client import (
    ExternalServiceError,
    TransfermarktClient,
    get_transfermarkt_client,
)
from scoutcrm.utils.db_async import get_session

router = APIRouter(tags=["admin-sync"])


async def _sync_one(
    store: PlayerSyncStore,
    client: TransfermarktClient,
    pacer: RequestPacer,
    player_id: uuid.UUID,
) -> SyncOutcome:
    """Run a single-player sync and map failures to HTTP errors.

    Raises:
        HTTPException: 404 unknown player, 400 when the player row could not
            be written, 502 when the external service failed.
    """
    try:
        outcome = await sync_player_by_id(store, client, pacer, player_id)
    except ValueError as exc:
        if str(exc) == "player_not_found":
            raise HTTPException(status_code=404, detail="Player not found") from exc
        raise
    except PlayerUpdateError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if outcome.status == SyncStatus.ERROR:
        raise HTTPException(status_code=502, detail=outcome.error or "Sync failed")
    return outcome


async def _load_player(db: AsyncSession, player_id: uuid.UUID) -> PlayerRead | None:
    player = await get_player_by_id(db, player_id)
    if player is None:
        return None
    return PlayerRead.model_validate(player, from_attributes=True)


@router.post("/players/{player_id}/sync", response_model=SyncResponse)
async def sync_player_route(
    player_id: uuid.UUID,
    store: PlayerSyncStore = Depends(get_player_sync_store),
    client: TransfermarktClient = Depends(get_transfermarkt_client),
    pacer: RequestPacer = Depends(get_request_pacer),
    db: AsyncSession = Depends(get_session),
) -> SyncResponse:
    """Sync one player now and return the refreshed record."""
    outcome = await _sync_one(store, client, pacer, player_id)
    return SyncResponse(
        matched=outcome.matched,
        player=await _load_player(db, player_id),
    )


@router.post(
    "/transfermarkt/sync",
    response_model=BatchSyncResponse | TriggeredSyncResponse,
)
async def transfermarkt_sync(
    player_id: uuid.UUID | None = Query(default=None),
    scope: SyncScope = Query(default="missing"),
    store: PlayerSyncStore = Depends(get_player_sync_store),
    client: TransfermarktClient = Depends(get_transfermarkt_client),
    pacer: RequestPacer = Depends(get_request_pacer),
    db: AsyncSession = Depends(get_session),
) -> Any:
    """Sync one player (``player_id``) or every player in ``scope``.

    Batch runs process players sequentially within the request; individual
    failures are reported in ``errors`` and never abort the run.
    """
    if player_id is not None:
        outcome = await _sync_one(store, client, pacer, player_id)
        matched = int(outcome.matched)
        return TriggeredSyncResponse(
            matched=matched,
            updated=matched,
            not_found=int(outcome.status == SyncStatus.NOT_FOUND),
            player=await _load_player(db, player_id),
        )

    result = await run_batch_sync(store, client, pacer, scope=scope)
    return BatchSyncResponse(
        scope=result.scope,
        scanned=result.scanned,
        matched=result.matched,
        updated=result.updated,
        not_found=result.not_found,
        errors=result.errors,
    )


@router.post("/transfermarkt/import", response_model=ImportResponse)
async def transfermarkt_import(
    body: ImportRequest,
    store: PlayerSyncStore = Depends(get_player_sync_store),
    client: TransfermarktClient = Depends(get_transfermarkt_client),
    db: AsyncSession = Depends(get_session),
) -> ImportResponse:
    """Create or refresh a player from a name search or a known external id."""
    try:
        result = await import_player(
            store, client, q=body.q, tm_id=body.tm_id, page=body.page
        )
    except ImportValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ExternalServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except PlayerUpdateError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return ImportResponse(
        imported=result.imported,
        matched=result.matched,
        player=(
            await _load_player(db, result.player_id)
            if result.player_id is not None
            else None
        ),
    )
