"""Pick the best external search candidate for a stored player name."""

from __future__ import annotations

import re
import unicodedata
from typing import Any, Iterable

from scoutcrm.services.tm_payloads import Candidate, parse_candidate

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_name(value: str | None) -> str:
    """Fold a name for comparison: no diacritics, lower case, alphanumerics only.

    "Kylian Mbappé" -> "kylianmbappe"
    """
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", value.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    # letters without a decomposition ("ø", "ł") are dropped, not transliterated
    return _NON_ALNUM.sub("", stripped)


def pick_candidate(
    query: str,
    candidates: Iterable[Any],
    date_of_birth: str | None = None,
) -> Candidate | None:
    """Select a single candidate; the first rule with a hit wins.

    1. normalized name equals the normalized query
    2. normalized name contains the normalized query
    3. birth date starts with ``date_of_birth`` (when given)
    4. the first candidate

    Returns None only when there are no candidates. Rule 3 can pick a
    candidate whose name has nothing in common with the query.
    """
    parsed = [c if isinstance(c, Candidate) else parse_candidate(c) for c in candidates]
    if not parsed:
        return None

    target = normalize_name(query)
    if target:
        names = [normalize_name(c.name) for c in parsed]
        for candidate, name in zip(parsed, names):
            if name == target:
                return candidate
        for candidate, name in zip(parsed, names):
            if target in name:
                return candidate

    if date_of_birth:
        for candidate in parsed:
            if candidate.birth_date and candidate.birth_date.startswith(date_of_birth):
                return candidate

    return parsed[0]
