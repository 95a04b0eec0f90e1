"""
Static lookup table of US states and territories.

The table is built once at import time into read-only mappings keyed by
postal code, lower-case name/alias and slug. Lookups are pure reads.
"""

from types import MappingProxyType
from typing import Iterable, Optional

from .models import StateInfo
from .strings import slugify


STATE_DATA: tuple[StateInfo, ...] = (
    StateInfo("AL", "Alabama"),
    StateInfo("AK", "Alaska"),
    StateInfo("AZ", "Arizona"),
    StateInfo("AR", "Arkansas"),
    StateInfo("CA", "California"),
    StateInfo("CO", "Colorado"),
    StateInfo("CT", "Connecticut"),
    StateInfo("DE", "Delaware"),
    StateInfo("FL", "Florida"),
    StateInfo("GA", "Georgia"),
    StateInfo("HI", "Hawaii"),
    StateInfo("ID", "Idaho"),
    StateInfo("IL", "Illinois"),
    StateInfo("IN", "Indiana"),
    StateInfo("IA", "Iowa"),
    StateInfo("KS", "Kansas"),
    StateInfo("KY", "Kentucky"),
    StateInfo("LA", "Louisiana"),
    StateInfo("ME", "Maine"),
    StateInfo("MD", "Maryland"),
    StateInfo("MA", "Massachusetts"),
    StateInfo("MI", "Michigan"),
    StateInfo("MN", "Minnesota"),
    StateInfo("MS", "Mississippi"),
    StateInfo("MO", "Missouri"),
    StateInfo("MT", "Montana"),
    StateInfo("NE", "Nebraska"),
    StateInfo("NV", "Nevada"),
    StateInfo("NH", "New Hampshire"),
    StateInfo("NJ", "New Jersey"),
    StateInfo("NM", "New Mexico"),
    StateInfo("NY", "New York"),
    StateInfo("NC", "North Carolina"),
    StateInfo("ND", "North Dakota"),
    StateInfo("OH", "Ohio"),
    StateInfo("OK", "Oklahoma"),
    StateInfo("OR", "Oregon"),
    StateInfo("PA", "Pennsylvania"),
    StateInfo("RI", "Rhode Island"),
    StateInfo("SC", "South Carolina"),
    StateInfo("SD", "South Dakota"),
    StateInfo("TN", "Tennessee"),
    StateInfo("TX", "Texas"),
    StateInfo("UT", "Utah"),
    StateInfo("VT", "Vermont"),
    StateInfo("VA", "Virginia"),
    StateInfo("WA", "Washington"),
    StateInfo("WV", "West Virginia"),
    StateInfo("WI", "Wisconsin"),
    StateInfo("WY", "Wyoming"),
    # "Washington" alone belongs to WA
    StateInfo(
        "DC",
        "District of Columbia",
        ("Washington DC", "Washington, DC", "Washington D.C.", "D.C."),
    ),
    StateInfo("PR", "Puerto Rico"),
    StateInfo("GU", "Guam"),
    StateInfo("VI", "U.S. Virgin Islands", ("Virgin Islands", "US Virgin Islands")),
    StateInfo("AS", "American Samoa"),
    StateInfo(
        "MP",
        "Northern Mariana Islands",
        ("Mariana Islands", "Commonwealth of the Northern Mariana Islands"),
    ),
)


class StateTable:
    """
    Immutable lookup over a set of StateInfo entries.

    Matching order for lookup():
    1. exact code (case-insensitive)
    2. exact name (case-insensitive)
    3. alias (case-insensitive)
    4. slug of the value against slugs of names and aliases

    Raises:
        ValueError: at construction, if a code is repeated or a name/alias
                    normalizes to two different codes
    """

    def __init__(self, entries: Iterable[StateInfo]):
        self.entries: tuple[StateInfo, ...] = tuple(entries)

        by_code: dict[str, StateInfo] = {}
        by_name: dict[str, StateInfo] = {}
        by_alias: dict[str, StateInfo] = {}
        by_slug: dict[str, StateInfo] = {}

        for state in self.entries:
            code = state.code.upper()
            if code in by_code:
                raise ValueError(f"Duplicate state code: {code}")
            by_code[code] = state
            by_name[state.name.lower()] = state

            for label in (state.name, *state.aliases):
                slug = slugify(label)
                owner = by_slug.get(slug)
                if owner is not None and owner.code != state.code:
                    raise ValueError(
                        f"'{label}' normalizes to both {owner.code} and {state.code}"
                    )
                if slug:
                    by_slug[slug] = state

            for alias in state.aliases:
                by_alias[alias.lower()] = state

        self._by_code = MappingProxyType(by_code)
        self._by_name = MappingProxyType(by_name)
        self._by_alias = MappingProxyType(by_alias)
        self._by_slug = MappingProxyType(by_slug)

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def by_code(self, code: Optional[str]) -> Optional[StateInfo]:
        """Exact code match only."""
        if not isinstance(code, str):
            return None
        return self._by_code.get(code.strip().upper())

    def lookup(self, value: Optional[str]) -> Optional[StateInfo]:
        """Resolve a code, name or alias to its StateInfo, or None."""
        if not isinstance(value, str):
            return None
        trimmed = value.strip()
        if not trimmed:
            return None

        found = self._by_code.get(trimmed.upper())
        if found:
            return found

        lower = trimmed.lower()
        found = self._by_name.get(lower) or self._by_alias.get(lower)
        if found:
            return found

        slug = slugify(trimmed)
        if slug:
            return self._by_slug.get(slug)
        return None


STATES = StateTable(STATE_DATA)


def find_state_info(value: Optional[str]) -> Optional[StateInfo]:
    """Resolve a free-text state value against the shared table."""
    return STATES.lookup(value)


def resolve_state_param(param: Optional[str]) -> tuple[str, str]:
    """
    Resolve a route parameter into (code, display name).

    Unknown 2-letter values pass through upper-cased so a listing page can
    still render; anything else unresolvable yields ("", "Unknown").
    """
    if not isinstance(param, str) or not param.strip():
        return "", "Unknown"

    cleaned = param.strip()
    info = STATES.by_code(cleaned)
    if info:
        return info.code, info.name

    if len(cleaned) == 2:
        return cleaned.upper(), cleaned.upper()

    info = STATES.lookup(cleaned.replace("-", " "))
    if info:
        return info.code, info.name

    return "", "Unknown"


def state_name_from_code(code: Optional[str]) -> Optional[str]:
    info = find_state_info(code)
    return info.name if info else None


def state_name_candidates(code: Optional[str]) -> list[str]:
    """Code, name and aliases of a state, for matching free-text state columns."""
    info = find_state_info(code)
    if not info:
        return []
    return list(dict.fromkeys((info.code, info.name, *info.aliases)))


def normalize_state_code(value: Optional[str]) -> Optional[str]:
    """Table code for value; a bare 2-letter value is trusted as a code."""
    info = find_state_info(value)
    if info:
        return info.code
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if len(trimmed) == 2:
        return trimmed.upper()
    return None
