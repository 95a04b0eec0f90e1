"""
Jurisdiction classification for grant records.

A grant's free-text state/city fields decide whether it is federal,
statewide or local. Classification is total: malformed input degrades to a
broader jurisdiction (city -> state -> federal) and never raises.
"""

import re
from collections.abc import Mapping
from typing import Any, Optional, Union

from .models import (
    FederalLocation,
    Grant,
    GrantLocation,
    Jurisdiction,
    LocalLocation,
    PrivateLocation,
    StateLocation,
)
from .states import find_state_info
from .strings import slugify, words_from_slug


# Slugs of state values that mean "not tied to one state"
FEDERAL_KEYWORDS = frozenset({
    "federal",
    "federal-nationwide",  # facet label "Federal (nationwide)"
    "nationwide",
    "national",
    "united-states",
    "us",
    "usa",
    "u-s",
    "u-s-a",
    "all-states",
    "multi-state",
    "multiple-states",
    "across-the-nation",
})

# Slugs of city values that mean "the whole state"
STATEWIDE_KEYWORDS = frozenset({
    "statewide",
    "whole-state",
    "state-wide",
    "across-the-state",
    "multiple-locations",
    "multiple-counties",
    "various-locations",
    "entire-state",
    "all-counties",
    "all-regions",
    "n-a",
    "na",
})

FEDERAL_STATE_LABELS = (
    "Federal",
    "Nationwide",
    "National",
    "United States",
    "US",
    "USA",
    "U.S.",
    "U.S.A.",
    "All States",
    "Multi-state",
    "Multiple States",
    "Across the Nation",
)

STATEWIDE_CITY_LABELS = tuple(dict.fromkeys(
    [k.replace("-", " ") for k in sorted(STATEWIDE_KEYWORDS)]
    + [words_from_slug(k) for k in sorted(STATEWIDE_KEYWORDS)]
))

PRIVATE_MARKER = "private"
FALLBACK_STATE_CODE = "US"

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")

GrantLike = Union[Grant, Mapping]


def read_field(grant: GrantLike, key: str) -> Any:
    if isinstance(grant, Mapping):
        return grant.get(key)
    return getattr(grant, key, None)


def is_federal_state_value(value: Optional[str]) -> bool:
    """True when a state value is blank or names the whole country."""
    slug = slugify(value) if isinstance(value, str) else ""
    return not slug or slug in FEDERAL_KEYWORDS


def is_statewide_city(value: Optional[str]) -> bool:
    """True when a city value is blank or means the whole state."""
    slug = slugify(value) if isinstance(value, str) else ""
    return not slug or slug in STATEWIDE_KEYWORDS


def is_private_type(*values: Optional[str]) -> bool:
    """True when any source type value marks private/foundation funding."""
    return any(
        isinstance(v, str) and PRIVATE_MARKER in v.lower()
        for v in values
    )


def fallback_state_code(state: Optional[str]) -> str:
    """Best-effort code for a state value missing from the lookup table ("N/A" -> "NA")."""
    raw = _NON_ALNUM.sub("", state) if isinstance(state, str) else ""
    return (raw[:2] or FALLBACK_STATE_CODE).upper()


def classify(
    state: Optional[str],
    city: Optional[str],
    *,
    grant_type: Optional[str] = None,
) -> GrantLocation:
    """
    Classify raw state/city text into a GrantLocation.

    Args:
        state: Free-text state ("CA", "California", "Federal", None, ...)
        city: Free-text city ("Sacramento", "Statewide", None, ...)
        grant_type: Optional source type; "private" wins over location

    Returns:
        Exactly one of FederalLocation, StateLocation, LocalLocation,
        PrivateLocation
    """
    if is_private_type(grant_type):
        return PrivateLocation()

    if is_federal_state_value(state):
        return FederalLocation()

    info = find_state_info(state)
    state_code = info.code if info else fallback_state_code(state)

    if is_statewide_city(city):
        return StateLocation(state_code)

    city_slug = slugify(city.strip())
    if not city_slug:
        return StateLocation(state_code)

    return LocalLocation(state_code, city_slug)


def infer_grant_location(grant: GrantLike) -> GrantLocation:
    """Classify a Grant or raw row by its state, city and source type."""
    grant_type = read_field(grant, "type")
    if not is_private_type(grant_type):
        grant_type = read_field(grant, "base_type")

    return classify(
        read_field(grant, "state"),
        read_field(grant, "city"),
        grant_type=grant_type,
    )


def matches_jurisdiction(grant: GrantLike, jurisdiction: Union[Jurisdiction, str]) -> bool:
    return infer_grant_location(grant).jurisdiction == Jurisdiction(jurisdiction)


def city_name_from_slug(slug: Optional[str]) -> str:
    return words_from_slug(slug) if slug else ""
