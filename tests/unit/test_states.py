"""Tests for the state lookup table."""

import pytest

from grant_directory.core.models import StateInfo
from grant_directory.core.states import (
    STATES,
    StateTable,
    find_state_info,
    normalize_state_code,
    resolve_state_param,
    state_name_candidates,
    state_name_from_code,
)


class TestLookup:
    """Tests for StateTable.lookup / find_state_info."""

    def test_code_case_insensitive(self):
        """Test two-letter codes in any case."""
        assert find_state_info("ca").code == "CA"
        assert find_state_info(" Tx ").code == "TX"

    def test_full_name(self):
        """Test exact name match."""
        assert find_state_info("California").code == "CA"
        assert find_state_info("  new york ").code == "NY"

    def test_alias(self):
        """Test alias match for multi-word variants."""
        assert find_state_info("Washington, DC").code == "DC"
        assert find_state_info("washington d.c.").code == "DC"
        assert find_state_info("D.C.").code == "DC"
        assert find_state_info("US Virgin Islands").code == "VI"

    def test_slug_match(self):
        """Test punctuation-insensitive match through slugs."""
        assert find_state_info("new-york").code == "NY"
        assert find_state_info("District-of-Columbia").code == "DC"
        assert find_state_info("Washington   DC").code == "DC"

    def test_washington_is_the_state(self):
        """Test bare "Washington" resolves to WA, not DC."""
        assert find_state_info("Washington").code == "WA"

    def test_unknown(self):
        """Test unmatched values return None."""
        assert find_state_info("Ontario") is None
        assert find_state_info("") is None
        assert find_state_info("   ") is None
        assert find_state_info(None) is None

    @pytest.mark.parametrize("state", list(STATES))
    def test_code_and_name_resolve_to_same_entry(self, state):
        """Test code and full name resolve to the same entry."""
        by_code = find_state_info(state.code)
        assert by_code is not None
        assert find_state_info(by_code.name) == by_code

    def test_table_size(self):
        """Test 50 states plus DC and five territories."""
        assert len(STATES) == 56


class TestStateTableValidation:
    """Tests for table construction invariants."""

    def test_duplicate_code(self):
        """Test repeated codes are rejected."""
        with pytest.raises(ValueError, match="Duplicate"):
            StateTable([StateInfo("AA", "Alpha"), StateInfo("AA", "Another")])

    def test_conflicting_alias(self):
        """Test an alias equal to another state's name is rejected."""
        with pytest.raises(ValueError, match="normalizes"):
            StateTable([StateInfo("AA", "Alpha"), StateInfo("BB", "Beta", ("Alpha",))])

    def test_custom_table_lookup(self):
        """Test lookups on a custom table."""
        table = StateTable([StateInfo("AA", "Alpha", ("Alpha Land",))])
        assert table.lookup("alpha-land").code == "AA"
        assert table.by_code("aa").name == "Alpha"
        assert table.by_code("Alpha") is None


class TestResolveStateParam:
    """Tests for resolve_state_param."""

    def test_code(self):
        assert resolve_state_param("ca") == ("CA", "California")

    def test_unknown_two_letter_passes_through(self):
        assert resolve_state_param("zz") == ("ZZ", "ZZ")

    def test_hyphenated_name(self):
        assert resolve_state_param("new-york") == ("NY", "New York")

    def test_unresolvable(self):
        assert resolve_state_param("atlantis") == ("", "Unknown")
        assert resolve_state_param("") == ("", "Unknown")
        assert resolve_state_param(None) == ("", "Unknown")


class TestHelpers:
    """Tests for name and code helpers."""

    def test_state_name_from_code(self):
        assert state_name_from_code("GU") == "Guam"
        assert state_name_from_code("ZZ") is None

    def test_state_name_candidates(self):
        """Test code, name and aliases are all offered once."""
        candidates = state_name_candidates("dc")
        assert candidates[0] == "DC"
        assert "District of Columbia" in candidates
        assert "Washington, DC" in candidates
        assert len(candidates) == len(set(candidates))

    def test_state_name_candidates_unknown(self):
        assert state_name_candidates("ZZ") == []

    def test_normalize_state_code(self):
        assert normalize_state_code("Texas") == "TX"
        assert normalize_state_code("zz") == "ZZ"
        assert normalize_state_code("Atlantis") is None
        assert normalize_state_code(None) is None
