"""
Core layer - location resolver and search over grant records.

Components:
- models: Grant, Agency, StateInfo, GrantLocation variants
- states: Immutable US state/territory lookup table
- location: Jurisdiction classifier (federal/state/local/private)
- slug: Canonical path builder and short ids
- agency: Agency slugs and matching
- search: Local filtering, pagination and facets
"""

from .models import (
    Agency,
    FacetSets,
    FederalLocation,
    Grant,
    GrantFilters,
    GrantLocation,
    Jurisdiction,
    LocalLocation,
    PrivateLocation,
    SearchResult,
    StateInfo,
    StateLocation,
)
from .strings import slugify, words_from_slug, normalize_category
from .states import STATES, StateTable, find_state_info, normalize_state_code
from .location import classify, infer_grant_location, matches_jurisdiction
from .slug import build_path, grant_path, grant_slug, short_id, short_id_from_slug
from .search import filter_grants_locally, grant_matches_filters, collect_facets

__all__ = [
    "Agency",
    "FacetSets",
    "FederalLocation",
    "Grant",
    "GrantFilters",
    "GrantLocation",
    "Jurisdiction",
    "LocalLocation",
    "PrivateLocation",
    "SearchResult",
    "StateInfo",
    "StateLocation",
    "slugify",
    "words_from_slug",
    "normalize_category",
    "STATES",
    "StateTable",
    "find_state_info",
    "normalize_state_code",
    "classify",
    "infer_grant_location",
    "matches_jurisdiction",
    "build_path",
    "grant_path",
    "grant_slug",
    "short_id",
    "short_id_from_slug",
    "filter_grants_locally",
    "grant_matches_filters",
    "collect_facets",
]
