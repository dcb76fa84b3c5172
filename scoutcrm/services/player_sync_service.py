"""Player sync against the external player-data service.

Drives search -> match -> profile fetch -> reconcile for one player or for a
batch. Every outcome is written to the player row (``tm_sync_status``,
``tm_sync_error``, ``last_synced_at``); there are no automatic retries, an
operator re-triggers sync by hand.

Batch runs are strictly sequential with courtesy pauses between external
calls. A failing player is recorded and the loop moves on.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from scoutcrm.schemas.players import SyncStatus
from scoutcrm.services.candidate_matcher import pick_candidate
from scoutcrm.services.player_reconciler import build_player_patch, record_snapshot
from scoutcrm.services.player_sync_store import (
    PlayerSyncStore,
    PlayerUpdateError,
    SyncScope,
    SyncTarget,
)
from scoutcrm.services.request_pacer import RequestPacer
from scoutcrm.services.tm_payloads import Candidate, parse_payload
from scoutcrm.services.transfermarkt_client import TransfermarktClient

logger = logging.getLogger(__name__)

SyncMode = Literal["single", "batch"]


class SyncError(RuntimeError):
    """A sync step failed for a reason other than the external service."""


@dataclass(frozen=True)
class SyncOutcome:
    """Result of one player's sync attempt."""

    player_id: uuid.UUID
    status: SyncStatus
    external_id: str | None = None
    error: str | None = None

    @property
    def matched(self) -> bool:
        return self.status == SyncStatus.OK


@dataclass
class BatchSyncResult:
    """Counters for a batch run; ``errors`` holds ``{"id", "msg"}`` entries."""

    scope: SyncScope
    scanned: int = 0
    matched: int = 0
    updated: int = 0
    not_found: int = 0
    errors: list[dict[str, str]] = field(default_factory=list)


@dataclass(frozen=True)
class _ResolvedProfile:
    external_id: str
    raw_profile: Any
    market_value: Any
    candidate: Candidate | None


async def _resolve_profile(
    client: TransfermarktClient,
    target: SyncTarget,
    pacer: RequestPacer,
    mode: SyncMode,
) -> _ResolvedProfile | None:
    """Run the external calls for one player; None means no search results."""
    external_id = target.transfermarkt_player_id
    candidate: Candidate | None = None

    if not external_id:
        results = await client.search_players(target.full_name)
        if mode == "batch":
            await pacer.pause("search")
        if not results:
            return None
        dob = target.date_of_birth.isoformat() if target.date_of_birth else None
        candidate = pick_candidate(target.full_name, results, dob)
        external_id = candidate.external_id if candidate else None
        if not external_id:
            raise SyncError("no candidate id")

    raw_profile = await client.get_profile(external_id)
    await pacer.pause("profile" if mode == "batch" else "single")
    market_value = await client.get_market_value(external_id)

    return _ResolvedProfile(
        external_id=external_id,
        raw_profile=raw_profile,
        market_value=market_value,
        candidate=candidate,
    )


async def _store_profile(
    store: PlayerSyncStore,
    target: SyncTarget,
    resolved: _ResolvedProfile,
) -> None:
    payload = parse_payload(resolved.raw_profile)
    patch = build_player_patch(
        target.stored,
        payload,
        resolved.external_id,
        candidate=resolved.candidate,
    )

    try:
        await store.upsert_cache(
            resolved.external_id, resolved.raw_profile, resolved.market_value
        )
    except Exception as exc:
        logger.warning(f"Cache upsert failed for {resolved.external_id}: {exc}")

    await record_snapshot(
        store,
        target.id,
        external_id=resolved.external_id,
        profile_url=patch.get("transfermarkt_url"),
        raw=resolved.raw_profile,
    )

    patch.update(
        tm_sync_status=SyncStatus.OK,
        tm_sync_error=None,
        last_synced_at=datetime.utcnow(),
    )
    await store.apply_patch(target.id, patch)


async def sync_player(
    store: PlayerSyncStore,
    client: TransfermarktClient,
    target: SyncTarget,
    pacer: RequestPacer,
    mode: SyncMode = "single",
) -> SyncOutcome:
    """Sync one player and persist the outcome.

    External and matching failures are recorded on the player (status
    ``error``, message verbatim) and returned as an ERROR outcome. Failures
    writing the player row raise PlayerUpdateError.
    """
    try:
        resolved = await _resolve_profile(client, target, pacer, mode)
    except Exception as exc:
        message = str(exc) or exc.__class__.__name__
        logger.error(f"Sync failed for {target.full_name} ({target.id}): {message}")
        await store.mark_status(target.id, SyncStatus.ERROR, error=message)
        return SyncOutcome(target.id, SyncStatus.ERROR, error=message)

    if resolved is None:
        logger.info(f"No external match for {target.full_name} ({target.id})")
        await store.mark_status(target.id, SyncStatus.NOT_FOUND)
        return SyncOutcome(target.id, SyncStatus.NOT_FOUND)

    await _store_profile(store, target, resolved)
    logger.info(
        f"Synced {target.full_name} ({target.id}) -> external id {resolved.external_id}"
    )
    return SyncOutcome(target.id, SyncStatus.OK, external_id=resolved.external_id)


async def sync_player_by_id(
    store: PlayerSyncStore,
    client: TransfermarktClient,
    pacer: RequestPacer,
    player_id: uuid.UUID,
) -> SyncOutcome:
    """Load a player and sync it in single mode.

    Raises:
        ValueError: "player_not_found" when no player has this id.
    """
    target = await store.get_target(player_id)
    if target is None:
        raise ValueError("player_not_found")
    return await sync_player(store, client, target, pacer, mode="single")


async def run_batch_sync(
    store: PlayerSyncStore,
    client: TransfermarktClient,
    pacer: RequestPacer,
    scope: SyncScope = "missing",
) -> BatchSyncResult:
    """Sync every player in scope, one at a time, newest first.

    ``missing`` selects players without an external id; ``all`` selects every
    player (linked players skip the search step).
    """
    targets = await store.list_targets(scope)
    result = BatchSyncResult(scope=scope)
    logger.info(f"Batch sync started: scope={scope}, players={len(targets)}")

    for target in targets:
        result.scanned += 1
        try:
            outcome = await sync_player(store, client, target, pacer, mode="batch")
        except PlayerUpdateError as exc:
            message = str(exc)
            logger.error(f"Could not save sync result for {target.id}: {message}")
            result.errors.append({"id": str(target.id), "msg": message})
            try:
                await store.mark_status(target.id, SyncStatus.ERROR, error=message)
            except PlayerUpdateError as mark_exc:
                logger.warning(f"Could not mark {target.id} as failed: {mark_exc}")
            await pacer.pause("error")
            continue

        if outcome.status == SyncStatus.NOT_FOUND:
            result.not_found += 1
        elif outcome.status == SyncStatus.ERROR:
            result.errors.append({"id": str(target.id), "msg": outcome.error or ""})
            await pacer.pause("error")
        else:
            result.matched += 1
            result.updated += 1

    logger.info(
        f"Batch sync finished: scope={scope}, scanned={result.scanned}, "
        f"matched={result.matched}, not_found={result.not_found}, "
        f"errors={len(result.errors)}"
    )
    return result
