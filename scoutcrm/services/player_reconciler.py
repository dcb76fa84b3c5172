"""Merge an external profile into a stored player without losing known data.

Every reconciled column is derived through ``build_player_patch``: the
external value when the profile has one, else the candidate's value (search
results carry a few of the same fields), else whatever is already stored.
An absent external value never clears a stored one.
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import date
from typing import Any, Callable, Mapping

from scoutcrm.services.candidate_matcher import normalize_name
from scoutcrm.services.player_sync_store import PlayerSyncStore, RECONCILED_FIELDS
from scoutcrm.services.tm_payloads import Candidate, ExternalPayload

logger = logging.getLogger(__name__)

SNAPSHOT_SOURCE = "transfermarkt"

# normalized label -> position code
POSITION_CODES: dict[str, str] = {
    "goalkeeper": "GK",
    "centreback": "CB",
    "centerback": "CB",
    "rightback": "RB",
    "leftback": "LB",
    "rightwingback": "RWB",
    "leftwingback": "LWB",
    "defensivemidfield": "DM",
    "centralmidfield": "CM",
    "attackingmidfield": "AM",
    "rightmidfield": "RM",
    "leftmidfield": "LM",
    "rightwinger": "RW",
    "leftwinger": "LW",
    "secondstriker": "CF",
    "centreforward": "CF",
    "centerforward": "CF",
    "striker": "ST",
    "gk": "GK",
    "cb": "CB",
    "rb": "RB",
    "lb": "LB",
    "dm": "DM",
    "cm": "CM",
    "am": "AM",
    "rw": "RW",
    "lw": "LW",
    "cf": "CF",
    "st": "ST",
}

_DESCRIPTION_DOB = re.compile(r"\*\s*(\d{2})[./-](\d{2})[./-](\d{4})")
_HEIGHT_NUMBER = re.compile(r"(\d+)(?:[.,](\d+))?")


def map_position(label: str | None) -> str | None:
    """Translate a position label to its short code; unknown labels pass through."""
    if not label:
        return None
    return POSITION_CODES.get(normalize_name(label), label)


def parse_date(value: Any) -> date | None:
    """Parse the leading ``YYYY-MM-DD`` of a date string."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value) < 10:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def parse_dob_from_description(description: str | None) -> date | None:
    """Pull a birth date out of a profile blurb such as ``"... * 21.08.1988 in ..."``."""
    if not description:
        return None
    match = _DESCRIPTION_DOB.search(description)
    if match is None:
        return None
    day, month, year = match.groups()
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def parse_height_cm(value: Any) -> int | None:
    """Accept 185, 1.85 or strings like ``"1,85 m"``; return whole centimetres."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _HEIGHT_NUMBER.search(value)
        if match is None:
            return None
        whole, frac = match.groups()
        number = float(f"{whole}.{frac}") if frac else float(whole)
    else:
        return None
    if number <= 0:
        return None
    if number < 3:
        number *= 100
    return int(round(number))


def _identity(value: Any) -> Any:
    return value


# column -> (profile field, candidate attribute or None, converter)
PROFILE_FIELD_MAP: dict[str, tuple[str, str | None, Callable[[Any], Any]]] = {
    "transfermarkt_url": ("profile_url", "profile_url", _identity),
    "image_url": ("image_url", "image_url", _identity),
    "main_position": ("position", "position", map_position),
    "dominant_foot": ("foot", None, _identity),
    "height_cm": ("height", None, parse_height_cm),
    "country_of_birth": ("country_of_birth", None, _identity),
    "current_club_name": ("club_name", "club_name", _identity),
    "current_club_country": ("club_country", None, _identity),
    "contract_until": ("contract_until", None, str),
}


def build_player_patch(
    stored: Mapping[str, Any],
    profile: ExternalPayload,
    external_id: str,
    candidate: Candidate | None = None,
) -> dict[str, Any]:
    """Return the column values to write after a successful profile fetch.

    A column comes out None only when the profile, the candidate and the
    stored record all lack it. ``date_of_birth`` prefers the stored value;
    scouts enter it by hand and the provider's is occasionally off by a day.
    """
    patch: dict[str, Any] = {"transfermarkt_player_id": external_id}

    for column, (profile_key, candidate_attr, convert) in PROFILE_FIELD_MAP.items():
        value = profile.get(profile_key)
        if value is not None:
            value = convert(value)
        if value is None and candidate is not None and candidate_attr is not None:
            raw_candidate_value = getattr(candidate, candidate_attr)
            if raw_candidate_value is not None:
                value = convert(raw_candidate_value)
        if value is None:
            value = stored.get(column)
        patch[column] = value

    dob = stored.get("date_of_birth")
    if dob is None:
        dob = parse_date(profile.get("birth_date")) or parse_dob_from_description(
            profile.get("description")
        )
    patch["date_of_birth"] = dob

    missing = set(RECONCILED_FIELDS) - set(patch)
    if missing:
        raise RuntimeError(f"unmapped player columns: {sorted(missing)}")
    return patch


async def record_snapshot(
    store: PlayerSyncStore,
    player_id: uuid.UUID,
    *,
    external_id: str | None,
    profile_url: str | None,
    raw: Any,
) -> bool:
    """Append an audit row for a raw payload; failures are logged, never raised."""
    try:
        await store.insert_snapshot(
            player_id,
            external_id=external_id,
            profile_url=profile_url,
            raw=raw,
            source=SNAPSHOT_SOURCE,
        )
    except Exception as exc:
        logger.warning(f"Audit snapshot failed for player {player_id}: {exc}")
        return False
    return True
