"""Unit tests for candidate name normalization and selection."""

from scoutcrm.services.candidate_matcher import normalize_name, pick_candidate
from scoutcrm.services.tm_payloads import Candidate


class TestNormalizeName:
    """Tests for normalize_name()."""

    def test_strips_diacritics_and_case(self):
        assert normalize_name("Kylian Mbappé") == "kylianmbappe"

    def test_drops_punctuation_and_spaces(self):
        assert normalize_name("N'Golo  Kanté-Jr.") == "ngolokantejr"

    def test_keeps_digits(self):
        assert normalize_name("Player 23") == "player23"

    def test_empty_and_none(self):
        assert normalize_name(None) == ""
        assert normalize_name("") == ""
        assert normalize_name(" .- ") == ""


class TestPickCandidate:
    """Tests for pick_candidate() rule ordering."""

    def test_exact_match_beats_earlier_partial_match(self):
        """The exact normalized name wins even when listed second."""
        results = [
            {"id": "1", "name": "R. Lewandowski"},
            {"id": "38253", "name": "Robert Lewandowski"},
        ]
        picked = pick_candidate("Robert Lewandowski", results)
        assert picked is not None
        assert picked.external_id == "38253"

    def test_exact_match_ignores_accents(self):
        results = [
            {"id": "10", "name": "Luka Modric Jr"},
            {"id": "27992", "name": "Luka Modrić"},
        ]
        picked = pick_candidate("Luka Modric", results)
        assert picked is not None
        assert picked.external_id == "27992"

    def test_substring_match_when_no_exact(self):
        results = [
            {"id": "1", "name": "Pedro Neto"},
            {"id": "2", "name": "Pedri Gonzalez Lopez"},
        ]
        picked = pick_candidate("Pedri", results)
        assert picked is not None
        assert picked.external_id == "2"

    def test_birth_date_prefix_when_names_differ(self):
        """With no name hit, a candidate born on the stored date is chosen."""
        results = [
            {"id": "1", "name": "Someone Else", "dateOfBirth": "1999-01-01"},
            {"id": "2", "name": "Another Player", "dateOfBirth": "2001-05-17T00:00:00"},
        ]
        picked = pick_candidate("Unrelated Name", results, date_of_birth="2001-05-17")
        assert picked is not None
        assert picked.external_id == "2"

    def test_falls_back_to_first(self):
        results = [{"id": "7", "name": "First"}, {"id": "8", "name": "Second"}]
        picked = pick_candidate("Nobody", results)
        assert picked is not None
        assert picked.external_id == "7"

    def test_empty_query_skips_name_rules(self):
        """An empty normalized query would be a substring of every name."""
        results = [
            {"id": "1", "name": "Alpha", "dateOfBirth": "1990-01-01"},
            {"id": "2", "name": "Beta", "dateOfBirth": "1995-03-03"},
        ]
        picked = pick_candidate("!!!", results, date_of_birth="1995-03-03")
        assert picked is not None
        assert picked.external_id == "2"

    def test_no_candidates(self):
        assert pick_candidate("Anyone", []) is None

    def test_accepts_parsed_candidates(self):
        candidates = [
            Candidate(external_id="1", name="Joao Felix"),
            Candidate(external_id="2", name="João Cancelo"),
        ]
        picked = pick_candidate("Joao Cancelo", candidates)
        assert picked is not None
        assert picked.external_id == "2"

    def test_candidate_without_id_can_still_be_picked(self):
        picked = pick_candidate("Ghost", [{"name": "Ghost"}])
        assert picked is not None
        assert picked.external_id is None
