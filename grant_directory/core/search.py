"""
Grant filtering, pagination and facets.

Filters are applied in memory over rows returned by the repository. Text
filters are case-insensitive substring matches; location filters go through
the jurisdiction classifier so listings agree with canonical paths.
"""

import math
from typing import Iterable, Optional, Union

import structlog

from .agency import agency_slug_candidates, grant_agency_slug
from .location import infer_grant_location, is_federal_state_value
from .models import (
    FacetSets,
    FederalLocation,
    Grant,
    GrantFilters,
    Jurisdiction,
    SearchResult,
    StateFacet,
)
from .states import find_state_info, normalize_state_code
from .strings import slugify, words_from_slug

logger = structlog.get_logger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 50
FEDERAL_FACET_LABEL = "Federal (nationwide)"

# Values of the state filter that select federal grants
FEDERAL_STATE_FILTERS = {"federal", "federal (nationwide)", "nationwide"}


def safe_number(value: Union[str, list, None], fallback: int) -> int:
    """Parse a positive integer query param, falling back on anything else."""
    if isinstance(value, list):
        value = value[0] if value else None
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return fallback
    return number if number > 0 else fallback


def _comparable(value: Optional[str]) -> str:
    return value.strip().lower() if isinstance(value, str) else ""


def _contains(text: Optional[str], keyword: str) -> bool:
    return keyword in _comparable(text)


def _effective_jurisdiction(filters: GrantFilters) -> Optional[Jurisdiction]:
    if filters.jurisdiction:
        return Jurisdiction(filters.jurisdiction)
    if _comparable(filters.state) in FEDERAL_STATE_FILTERS:
        return Jurisdiction.FEDERAL
    return None


def grant_matches_filters(grant: Grant, filters: GrantFilters) -> bool:
    """Check one grant against every active filter."""
    keyword = _comparable(filters.query)
    if keyword and not any(
        _contains(text, keyword) for text in (grant.title, grant.summary, grant.description)
    ):
        return False

    category = _comparable(filters.category)
    if category and not (
        _contains(grant.category, category) or slugify(grant.category) == slugify(category)
    ):
        return False

    location = infer_grant_location(grant)

    state_code = normalize_state_code(filters.state_code)
    if state_code:
        if not hasattr(location, "state_code"):
            return False
        if location.state_code.upper() != state_code:
            return False

    jurisdiction = _effective_jurisdiction(filters)
    if jurisdiction and location.jurisdiction != jurisdiction:
        return False

    state = _comparable(filters.state)
    if state and state not in FEDERAL_STATE_FILTERS and not _contains(grant.state, state):
        return False

    city = _comparable(filters.city)
    if city and not (_contains(grant.city, city) or getattr(location, "city_slug", None) == city):
        return False

    agency = _comparable(filters.agency)
    if agency and not (_contains(grant.agency, agency) or _contains(grant.agency_name, agency)):
        return False

    if filters.agency_slug:
        candidates = agency_slug_candidates(filters.agency_slug)
        if grant_agency_slug(grant) != candidates.slug and not (
            candidates.name_fragment
            and (
                _contains(grant.agency_name, candidates.name_fragment)
                or _contains(grant.agency, candidates.name_fragment)
            )
        ):
            return False

    if filters.has_apply_link and not grant.apply_link:
        return False

    return True


def clamp_page_size(page_size: Optional[int], default: int = DEFAULT_PAGE_SIZE) -> int:
    if page_size and page_size > 0:
        return min(page_size, MAX_PAGE_SIZE)
    return default


def filter_grants_locally(
    grants: Iterable[Grant],
    filters: Optional[GrantFilters] = None,
    default_page_size: int = DEFAULT_PAGE_SIZE,
) -> SearchResult:
    """
    Filter, sort (newest scraped first) and paginate grants.

    Args:
        grants: Candidate grants
        filters: Active filters (defaults to none)
        default_page_size: Page size when filters.page_size is unset

    Returns:
        SearchResult for the requested page
    """
    filters = filters or GrantFilters()
    page = filters.page if filters.page and filters.page > 0 else 1
    page_size = clamp_page_size(filters.page_size, default_page_size)

    matched = [g for g in grants if grant_matches_filters(g, filters)]
    matched.sort(key=lambda g: g.scraped_at or "", reverse=True)

    start = (page - 1) * page_size
    total = len(matched)

    logger.debug(
        "grants_filtered",
        total=total,
        page=page,
        page_size=page_size,
        jurisdiction=filters.jurisdiction.value if filters.jurisdiction else "all",
    )

    return SearchResult(
        grants=matched[start:start + page_size],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size) if total else 0,
    )


def _distinct(values: Iterable[Optional[str]]) -> list[str]:
    return sorted({v.strip() for v in values if isinstance(v, str) and v.strip()})


def collect_facets(grants: Iterable[Grant], limit: int = 50) -> FacetSets:
    """Distinct categories, states and agencies for filter dropdowns."""
    grants = list(grants)
    states = _distinct(g.state for g in grants)[:60]

    has_federal = any("federal" in s.lower() or "nationwide" in s.lower() for s in states)
    if not has_federal:
        states = [FEDERAL_FACET_LABEL, *states]

    return FacetSets(
        categories=_distinct(g.category for g in grants)[:limit],
        states=states,
        agencies=_distinct(g.agency_name or g.agency for g in grants)[:limit],
    )


def to_state_facet(state_value: Optional[str]) -> Optional[StateFacet]:
    """Map a raw state value to a facet, None for federal or unresolvable values."""
    if not isinstance(state_value, str) or not state_value.strip():
        return None
    raw = state_value.strip()
    if is_federal_state_value(raw):
        return None

    info = find_state_info(raw)
    code = info.code if info else normalize_state_code(raw)
    if not code:
        return None

    label = info.name if info else words_from_slug(slugify(raw)) or raw
    return StateFacet(code=code.upper(), label=label)


def aggregate_state_facets(grants: Iterable[Grant]) -> list[StateFacet]:
    """Count grants per state code, sorted by code."""
    by_code: dict[str, StateFacet] = {}
    for grant in grants:
        if isinstance(infer_grant_location(grant), FederalLocation):
            continue
        facet = to_state_facet(grant.state)
        if facet is None:
            continue
        existing = by_code.get(facet.code)
        if existing:
            existing.grant_count += 1
        else:
            by_code[facet.code] = facet
    return sorted(by_code.values(), key=lambda f: f.code)
