"""Tests for agency slugs and grant matching."""

from grant_directory.core.agency import (
    agencies_from_grants,
    agency_matches_grant,
    agency_slug_candidates,
    grant_agency_slug,
    to_agency,
)
from grant_directory.core.models import Agency, Grant


class TestAgencySlugCandidates:
    """Tests for agency_slug_candidates."""

    def test_hyphenated_code(self):
        candidates = agency_slug_candidates(" HHS-ACF ")
        assert candidates.slug == "hhs-acf"
        assert candidates.name_fragment == "hhs acf"
        assert candidates.code_candidates == ["hhs-acf", "HHS-ACF", "hhsacf", "HHSACF"]

    def test_single_word_has_no_duplicates(self):
        assert agency_slug_candidates("nsf").code_candidates == ["nsf", "NSF"]

    def test_empty(self):
        candidates = agency_slug_candidates(None)
        assert candidates.slug == ""
        assert candidates.code_candidates == []


class TestToAgency:
    """Tests for to_agency."""

    def test_code_preferred_over_name(self):
        agency = to_agency({"id": "1", "agency_name": "National Science Foundation", "agency_code": "NSF"})
        assert agency.slug == "nsf"
        assert agency.agency_name == "National Science Foundation"

    def test_explicit_slug(self):
        agency = to_agency({"id": "1", "slug": "Energy", "agency_code": "DOE"})
        assert agency.slug == "energy"

    def test_name_column(self):
        agency = to_agency({"id": "x1", "name": " Dept of Energy "})
        assert agency.slug == "dept-of-energy"
        assert agency.agency_name == "Dept of Energy"

    def test_fallback_slug(self):
        assert to_agency({"id": "7"}, fallback_slug="Some Agency").slug == "some-agency"

    def test_id_only(self):
        agency = to_agency({"id": "9"})
        assert agency.slug == "9"
        assert agency.agency_name == "9"

    def test_empty_row(self):
        assert to_agency(None) is None
        assert to_agency({}) is None


class TestAgencyMatching:
    """Tests for matching grants to agencies."""

    def test_grant_agency_slug(self):
        assert grant_agency_slug(Grant(id="1", agency_code="NEA", agency="Endowment")) == "nea"
        assert grant_agency_slug(Grant(id="1")) == ""

    def test_match_by_slug(self):
        agency = Agency(id="1", slug="nea", agency_name="National Endowment for the Arts")
        assert agency_matches_grant(agency, Grant(id="g", agency_code="NEA"))

    def test_match_by_code_without_hyphen(self):
        agency = Agency(id="1", slug="acf", agency_name="Administration for Children", agency_code="HHS-ACF")
        assert agency_matches_grant(agency, Grant(id="g", agency_code="hhsacf", agency="Other"))

    def test_match_by_name(self):
        agency = Agency(id="1", slug="nsf", agency_name="National Science Foundation", agency_code="NSF")
        grant = Grant(id="g", agency="National Science Foundation")
        assert agency_matches_grant(agency, grant)

    def test_no_match(self):
        agency = Agency(id="1", slug="nsf", agency_name="National Science Foundation")
        assert not agency_matches_grant(agency, Grant(id="g", agency="Department of Energy"))


class TestAgenciesFromGrants:
    """Tests for agencies_from_grants."""

    def test_one_agency_per_slug_sorted_by_name(self, grants):
        agencies = agencies_from_grants(grants + grants)
        names = [a.agency_name for a in agencies]
        assert len(agencies) == 5
        assert names == sorted(names, key=str.lower)
        assert {a.slug for a in agencies} >= {"nea", "city-of-sacramento"}

    def test_grants_without_agency_skipped(self):
        assert agencies_from_grants([Grant(id="1")]) == []
