"""Aggregated player details: stored record plus live external sections."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from scoutcrm.schemas.tm_players_cache import TmPlayerCache
from scoutcrm.services.transfermarkt_client import PLAYER_SECTIONS, TransfermarktClient

logger = logging.getLogger(__name__)

_SPIELER_ID = re.compile(r"/spieler/(\d+)(?:[/?#]|$)", re.IGNORECASE)


def parse_external_id_from_url(url: str | None) -> str | None:
    """Extract the numeric id from a profile URL.

    "https://www.transfermarkt.com/robert-lewandowski/profil/spieler/38253" -> "38253"
    """
    if not url:
        return None
    match = _SPIELER_ID.search(url)
    return match.group(1) if match else None


@dataclass
class ExternalSections:
    data: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)


async def fetch_external_sections(
    client: TransfermarktClient,
    external_id: str,
) -> ExternalSections:
    """Fetch all per-player sections concurrently.

    A failing section is reported under ``errors`` and its value left None;
    the others are still returned.
    """
    results = await asyncio.gather(
        *(client.get_section(external_id, section) for section in PLAYER_SECTIONS),
        return_exceptions=True,
    )
    sections = ExternalSections()
    for section, result in zip(PLAYER_SECTIONS, results):
        if isinstance(result, Exception):
            logger.warning(f"Section {section} failed for {external_id}: {result}")
            sections.data[section] = None
            sections.errors[section] = str(result)
        else:
            sections.data[section] = result
    return sections


async def get_cached_profile(db: AsyncSession, external_id: str) -> dict[str, Any]:
    """Return the cached profile row as a dict, or ``{}`` when nothing is cached."""
    cache = await db.get(TmPlayerCache, external_id)
    if cache is None:
        return {}
    return {
        "profile": cache.profile,
        "market_value": cache.market_value,
        "cached_at": cache.cached_at.isoformat(),
    }
