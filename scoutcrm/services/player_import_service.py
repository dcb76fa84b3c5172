"""Create or refresh a player straight from the external service.

Admins import by free-text name (search + best candidate) or by a known
external id. A player already linked to that id is updated in place;
otherwise a new player row is inserted.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from scoutcrm.schemas.players import SyncStatus
from scoutcrm.services.candidate_matcher import pick_candidate
from scoutcrm.services.player_reconciler import (
    build_player_patch,
    parse_date,
    parse_dob_from_description,
    record_snapshot,
)
from scoutcrm.services.player_sync_store import PlayerSyncStore
from scoutcrm.services.tm_payloads import Candidate, parse_payload
from scoutcrm.services.transfermarkt_client import TransfermarktClient

logger = logging.getLogger(__name__)


class ImportValidationError(ValueError):
    """The request or the external profile lacks what an import needs."""


@dataclass(frozen=True)
class ImportResult:
    imported: int
    matched: int
    player_id: uuid.UUID | None = None


async def import_player(
    store: PlayerSyncStore,
    client: TransfermarktClient,
    *,
    q: str | None = None,
    tm_id: str | None = None,
    page: int = 1,
) -> ImportResult:
    """Import one player by external id or by name search.

    Raises:
        ImportValidationError: no query given, the chosen candidate has no id,
            or the profile lacks a full name or date of birth.
        ExternalServiceError: the external service failed.
    """
    candidate: Candidate | None = None
    tm_id = (tm_id or "").strip()
    q = (q or "").strip()

    if tm_id:
        raw_profile = await client.get_profile(tm_id)
    else:
        if not q:
            raise ImportValidationError("Missing 'q' (player name)")
        results = await client.search_players(q, page=page)
        if not results:
            return ImportResult(imported=0, matched=0)
        candidate = pick_candidate(q, results)
        if candidate is None or not candidate.external_id:
            raise ImportValidationError("No candidate id")
        tm_id = candidate.external_id
        raw_profile = await client.get_profile(tm_id)

    payload = parse_payload(raw_profile)
    external_id = str(payload.get("id") or tm_id)

    full_name = payload.get("name") or (candidate.name if candidate else None)
    dob = parse_date(payload.get("birth_date")) or parse_dob_from_description(
        payload.get("description")
    )
    if not full_name or dob is None:
        raise ImportValidationError(
            "Missing full name or date of birth from Transfermarkt"
        )

    existing_id = await store.find_player_id_by_external_id(external_id)
    existing = await store.get_target(existing_id) if existing_id else None
    stored = dict(existing.stored) if existing else {}
    stored["date_of_birth"] = None  # an import takes the provider's birth date

    values = build_player_patch(stored, payload, external_id, candidate=candidate)
    values.update(
        full_name=str(full_name),
        date_of_birth=dob,
        tm_sync_status=SyncStatus.OK,
        tm_sync_error=None,
        last_synced_at=datetime.utcnow(),
    )

    if existing is not None:
        await store.apply_patch(existing.id, values)
        player_id, imported, matched = existing.id, 0, 1
    else:
        player_id = await store.insert_player(values)
        imported, matched = 1, 0

    await record_snapshot(
        store,
        player_id,
        external_id=external_id,
        profile_url=values.get("transfermarkt_url"),
        raw=raw_profile,
    )
    logger.info(
        f"Imported {full_name} (external id {external_id}): "
        f"imported={imported}, matched={matched}"
    )
    return ImportResult(imported=imported, matched=matched, player_id=player_id)
