"""Unit tests for external payload field extraction."""

from scoutcrm.services.tm_payloads import (
    KnownPayload,
    RawPayload,
    extract,
    normalize_search_results,
    parse_candidate,
    parse_payload,
)

PROFILE = {
    "id": "38253",
    "name": "Robert Lewandowski",
    "url": "https://www.transfermarkt.com/robert-lewandowski/profil/spieler/38253",
    "imageUrl": "https://img.example.com/38253.jpg",
    "dateOfBirth": "1988-08-21",
    "placeOfBirth": {"city": "Warszawa", "country": "Poland"},
    "height": 185,
    "foot": "right",
    "position": {"main": "Centre-Forward", "other": ["Second Striker"]},
    "club": {"name": "FC Barcelona", "contractExpires": "2026-06-30"},
}


class TestExtract:
    """Tests for extract() path resolution."""

    def test_nested_path(self):
        assert extract(PROFILE, "country_of_birth") == "Poland"
        assert extract(PROFILE, "club_name") == "FC Barcelona"

    def test_nested_path_preferred_over_flat(self):
        assert extract(PROFILE, "position") == "Centre-Forward"

    def test_flat_fallback_when_position_is_a_string(self):
        assert extract({"position": "Goalkeeper"}, "position") == "Goalkeeper"

    def test_alternate_key(self):
        assert extract({"birthDate": "2001-01-01"}, "birth_date") == "2001-01-01"
        assert extract({"currentClub": {"name": "Ajax"}}, "club_name") == "Ajax"

    def test_blank_strings_are_absent(self):
        assert extract({"name": "  ", "fullName": "Real Name"}, "name") == "Real Name"

    def test_objects_are_not_scalars(self):
        assert extract({"image": {"src": "x"}}, "image_url") is None


class TestParsePayload:
    """Tests for parse_payload() classification."""

    def test_known_payload(self):
        payload = parse_payload(PROFILE)
        assert isinstance(payload, KnownPayload)
        assert payload.kind == "known"
        assert payload.get("height") == 185
        assert payload.get("missing-field") is None

    def test_unrecognized_mapping_is_raw(self):
        payload = parse_payload({"foo": "bar"})
        assert isinstance(payload, RawPayload)
        assert payload.get("name") is None

    def test_non_mapping_is_raw(self):
        payload = parse_payload(["not", "a", "profile"])
        assert isinstance(payload, RawPayload)
        assert payload.raw == ["not", "a", "profile"]


class TestSearchResults:
    """Tests for search response normalization."""

    def test_wrapped_results(self):
        body = {"query": "x", "results": [{"id": "1", "name": "A"}, "junk"]}
        assert normalize_search_results(body) == [{"id": "1", "name": "A"}]

    def test_bare_list(self):
        assert normalize_search_results([{"id": 2}]) == [{"id": 2}]

    def test_unexpected_shape(self):
        assert normalize_search_results({"results": None}) == []
        assert normalize_search_results("error") == []

    def test_parse_candidate_stringifies_id(self):
        candidate = parse_candidate(
            {"id": 38253, "name": "Robert Lewandowski", "club": {"name": "Barcelona"}}
        )
        assert candidate.external_id == "38253"
        assert candidate.club_name == "Barcelona"
        assert candidate.birth_date is None
