"""Typed views over loosely shaped external-service payloads.

The player-data service does not use stable field names: the same value can
arrive as ``birthDate`` or ``dateOfBirth``, ``club.name`` or
``currentClub.name``, depending on the endpoint and scraper version. Every
field we read is listed once in ``FIELD_PATHS`` with the key paths it may
appear under, in priority order. Nothing outside this module reaches into raw
payload dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Union

# internal field -> dotted key paths, first non-empty scalar wins
FIELD_PATHS: dict[str, tuple[str, ...]] = {
    "id": ("id", "playerId"),
    "name": ("name", "playerName", "fullName"),
    "birth_date": ("dateOfBirth", "birthDate"),
    "profile_url": ("url", "profileUrl"),
    "image_url": ("imageUrl", "image"),
    "position": ("position.main", "position", "mainPosition"),
    "foot": ("foot",),
    "height": ("height",),
    "country_of_birth": ("placeOfBirth.country",),
    "club_name": ("club.name", "currentClub.name"),
    "club_country": ("club.country", "currentClub.country"),
    "contract_until": ("club.contractExpires", "contractExpires"),
    "description": ("description",),
    "market_value": ("marketValue",),
}

_SCALARS = (str, int, float)


def _walk(raw: Any, path: str) -> Any:
    node = raw
    for part in path.split("."):
        if isinstance(node, Mapping):
            node = node.get(part)
        elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
            node = node[int(part)]
        else:
            return None
        if node is None:
            return None
    return node


def extract(raw: Any, name: str) -> Any:
    """Return the first present scalar for ``name``, or None.

    Empty strings and nested objects count as absent.
    """
    for path in FIELD_PATHS[name]:
        value = _walk(raw, path)
        if isinstance(value, bool) or not isinstance(value, _SCALARS):
            continue
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        return value
    return None


@dataclass(frozen=True)
class KnownPayload:
    """Payload with at least one field recognized through FIELD_PATHS."""

    fields: dict[str, Any]
    raw: dict[str, Any]
    kind: Literal["known"] = "known"

    def get(self, name: str) -> Any:
        return self.fields.get(name)


@dataclass(frozen=True)
class RawPayload:
    """Payload we could not interpret; kept only for auditing."""

    raw: Any
    kind: Literal["raw"] = "raw"

    def get(self, name: str) -> Any:
        return None


ExternalPayload = Union[KnownPayload, RawPayload]


def parse_payload(raw: Any) -> ExternalPayload:
    """Classify a raw JSON value as a known or unknown payload."""
    if not isinstance(raw, Mapping):
        return RawPayload(raw=raw)
    fields = {name: extract(raw, name) for name in FIELD_PATHS}
    fields = {k: v for k, v in fields.items() if v is not None}
    if not fields:
        return RawPayload(raw=dict(raw))
    return KnownPayload(fields=fields, raw=dict(raw))


@dataclass(frozen=True)
class Candidate:
    """One record from a search response."""

    external_id: str | None
    name: str
    birth_date: str | None = None
    club_name: str | None = None
    position: str | None = None
    profile_url: str | None = None
    image_url: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)


def parse_candidate(raw: Any) -> Candidate:
    """Build a Candidate from a search result entry (missing fields are None)."""
    payload = parse_payload(raw)
    external_id = payload.get("id")
    name = payload.get("name")
    birth_date = payload.get("birth_date")
    return Candidate(
        external_id=str(external_id) if external_id is not None else None,
        name=str(name) if name is not None else "",
        birth_date=str(birth_date) if birth_date is not None else None,
        club_name=payload.get("club_name"),
        position=payload.get("position"),
        profile_url=payload.get("profile_url"),
        image_url=payload.get("image_url"),
        raw=payload.raw if isinstance(payload.raw, dict) else {},
    )


def normalize_search_results(body: Any) -> list[dict[str, Any]]:
    """Accept ``[...]`` or ``{"results": [...]}``; anything else is empty."""
    if isinstance(body, Mapping):
        body = body.get("results")
    if not isinstance(body, list):
        return []
    return [dict(item) for item in body if isinstance(item, Mapping)]
