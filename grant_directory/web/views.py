"""
Request handlers for the grant directory.

Listing pages filter and paginate grants. Detail pages look a grant up by
the short id at the end of the slug (or a legacy ?id= query), then redirect
permanently to the canonical path whenever the request URL differs from it.
"""

from datetime import datetime
from typing import Optional

import aiohttp_jinja2
import structlog
from aiohttp import web

from ..config.loader import Settings
from ..core.location import (
    city_name_from_slug,
    infer_grant_location,
    is_federal_state_value,
    is_statewide_city,
)
from ..core.models import Grant, GrantFilters, Jurisdiction
from ..core.search import safe_number
from ..core.slug import (
    category_path,
    grant_path,
    jurisdiction_index_path,
    short_id_from_slug,
)
from ..core.states import resolve_state_param
from ..core.strings import slugify, words_from_slug
from ..storage import GrantRepository
from ..sitemap import build_sitemap_entries, render_sitemap_xml

logger = structlog.get_logger(__name__)

REPOSITORY_KEY = web.AppKey("repository", GrantRepository)
SETTINGS_KEY = web.AppKey("settings", Settings)

RELATED_LIMIT = 6

JURISDICTION_TITLES = {
    Jurisdiction.FEDERAL: "Federal Grants",
    Jurisdiction.STATE: "State Grants",
    Jurisdiction.LOCAL: "Local Grants",
    Jurisdiction.PRIVATE: "Private Grants & Foundation Funding",
}


def is_date_in_past(date_str: Optional[str]) -> bool:
    """
    Check if a date string (YYYY-MM-DD) is in the past.

    Args:
        date_str: Date in ISO format (YYYY-MM-DD)

    Returns:
        True if date is in the past, False otherwise
    """
    if not date_str:
        return False

    try:
        date = datetime.fromisoformat(date_str)
        return date.date() < datetime.now().date()
    except (ValueError, TypeError):
        return False


def _repository(request: web.Request) -> GrantRepository:
    return request.app[REPOSITORY_KEY]


def _settings(request: web.Request) -> Settings:
    return request.app[SETTINGS_KEY]


def _query_param(request: web.Request, key: str) -> Optional[str]:
    value = request.query.get(key)
    if value is None or not value.strip():
        return None
    return value.strip()


def parse_filters(request: web.Request, **overrides) -> GrantFilters:
    """Read listing filters from the query string."""
    settings = _settings(request)
    page_size = min(
        safe_number(request.query.get("pageSize"), settings.page_size),
        settings.max_page_size,
    )
    filters = GrantFilters(
        query=_query_param(request, "keyword") or _query_param(request, "query"),
        category=_query_param(request, "category"),
        state=_query_param(request, "state"),
        agency=_query_param(request, "agency"),
        has_apply_link=request.query.get("has_apply_link") == "1",
        page=safe_number(request.query.get("page"), 1),
        page_size=page_size,
    )
    for key, value in overrides.items():
        setattr(filters, key, value)
    return filters


def _page_url(request: web.Request, page: int) -> str:
    query = dict(request.query)
    query["page"] = str(page)
    return str(request.rel_url.with_query(query))


def render_listing(request: web.Request, title: str, filters: GrantFilters, **extra) -> web.Response:
    repository = _repository(request)
    result = repository.search(filters)

    logger.info(
        "listing_rendered",
        path=request.path,
        total=result.total,
        page=result.page,
    )

    pagination = {
        "previous": _page_url(request, result.page - 1) if result.page > 1 else None,
        "next": _page_url(request, result.page + 1) if result.page < result.total_pages else None,
    }

    return aiohttp_jinja2.render_template(
        "grants_list.html",
        request,
        {
            "title": title,
            "result": result,
            "filters": filters,
            "facets": repository.facets(),
            "pagination": pagination,
            **extra,
        },
    )


async def handle_index(request: web.Request) -> web.Response:
    raise web.HTTPFound("/grants")


async def handle_health(request: web.Request) -> web.Response:
    return web.Response(text="OK", status=200)


async def handle_grants(request: web.Request) -> web.Response:
    """All grants, with the full filter bar."""
    return render_listing(request, "Grant Directory", parse_filters(request))


async def handle_federal_grants(request: web.Request) -> web.Response:
    filters = parse_filters(request, jurisdiction=Jurisdiction.FEDERAL)
    return render_listing(request, JURISDICTION_TITLES[Jurisdiction.FEDERAL], filters)


async def handle_private_grants(request: web.Request) -> web.Response:
    filters = parse_filters(request, jurisdiction=Jurisdiction.PRIVATE)
    return render_listing(request, JURISDICTION_TITLES[Jurisdiction.PRIVATE], filters)


async def handle_state_grants(request: web.Request) -> web.Response:
    """Statewide grants for one state; non-canonical codes redirect."""
    param = request.match_info["state_code"]
    code, name = resolve_state_param(param)
    if not code:
        raise web.HTTPNotFound(text=f"Unknown state: {param}")
    if code != param:
        raise web.HTTPMovedPermanently(f"/grants/state/{code}")

    filters = parse_filters(request, jurisdiction=Jurisdiction.STATE, state_code=code)
    return render_listing(request, f"{name} Grants", filters, state_code=code, state_name=name)


async def handle_local_grants(request: web.Request) -> web.Response:
    """Grants for one city in one state."""
    param = request.match_info["state_code"]
    city_param = request.match_info["city_slug"]
    code, name = resolve_state_param(param)
    if not code:
        raise web.HTTPNotFound(text=f"Unknown state: {param}")

    city_slug = slugify(city_param)
    if not city_slug:
        raise web.HTTPMovedPermanently(f"/grants/state/{code}")
    if code != param or city_slug != city_param:
        raise web.HTTPMovedPermanently(f"/grants/local/{code}/{city_slug}")

    city_name = city_name_from_slug(city_slug)
    filters = parse_filters(
        request,
        jurisdiction=Jurisdiction.LOCAL,
        state_code=code,
        city=city_slug,
    )
    return render_listing(
        request,
        f"{city_name}, {name} Grants",
        filters,
        state_code=code,
        state_name=name,
        city_name=city_name,
    )


async def handle_category_grants(request: web.Request) -> web.Response:
    param = request.match_info["category_slug"]
    category_slug = slugify(param)
    if not category_slug:
        raise web.HTTPNotFound()
    if category_slug != param:
        raise web.HTTPMovedPermanently(f"/grants/category/{category_slug}")

    title = f"{words_from_slug(category_slug)} Grants"
    filters = parse_filters(request, category=category_slug)
    return render_listing(request, title, filters, category_slug=category_slug)


async def handle_category_state_grants(request: web.Request) -> web.Response:
    category_param = request.match_info["category_slug"]
    state_param = request.match_info["state_code"]
    category_slug = slugify(category_param)
    code, name = resolve_state_param(state_param)
    if not category_slug or not code:
        raise web.HTTPNotFound()
    if category_slug != category_param or code != state_param:
        raise web.HTTPMovedPermanently(f"/grants/category/{category_slug}/{code}")

    title = f"{words_from_slug(category_slug)} Grants in {name}"
    filters = parse_filters(request, category=category_slug, state_code=code)
    return render_listing(
        request, title, filters, category_slug=category_slug, state_code=code, state_name=name
    )


def load_grant(request: web.Request) -> Optional[Grant]:
    """
    Find the grant addressed by ?id= or by the short id in the slug.

    When several grants share a short id, the one whose canonical path is
    the request path wins, then the newest.
    """
    repository = _repository(request)
    grant_id = _query_param(request, "id")
    if grant_id:
        return repository.get_by_id(grant_id)

    short = short_id_from_slug(request.match_info.get("slug"))
    candidates = repository.find_by_short_id(short)
    for grant in candidates:
        if grant_path(grant) == request.path:
            return grant
    return candidates[0] if candidates else None


def related_grants(repository: GrantRepository, grant: Grant) -> list[tuple[Grant, str]]:
    """Grants of the same category and jurisdiction, excluding the grant itself."""
    location = infer_grant_location(grant)
    if not grant.category:
        return []
    filters = GrantFilters(
        category=grant.category,
        jurisdiction=location.jurisdiction,
        page=1,
        page_size=RELATED_LIMIT + 1,
    )
    result = repository.search(filters)
    return [(g, grant_path(g)) for g in result.grants if g.id != grant.id][:RELATED_LIMIT]


async def handle_grant_detail(request: web.Request) -> web.Response:
    """
    Grant detail page for every jurisdiction.

    The request is served only at the grant's canonical path. Anything
    else (wrong jurisdiction, stale title slug, ?id= query) gets a 301.
    """
    grant = load_grant(request)
    if grant is None:
        raise web.HTTPNotFound(text="Grant not found")

    canonical = grant_path(grant)
    if request.path != canonical or request.query_string:
        logger.info("canonical_redirect", request_path=request.path_qs, canonical=canonical)
        raise web.HTTPMovedPermanently(canonical)

    location = infer_grant_location(grant)
    return aiohttp_jinja2.render_template(
        "grant_detail.html",
        request,
        {
            "title": grant.title or "Grant",
            "grant": grant,
            "location": location,
            "canonical_url": f"{_settings(request).site_url}{canonical}",
            "index_path": jurisdiction_index_path(location),
            "category_path": category_path(grant.category),
            "related": related_grants(_repository(request), grant),
        },
    )


async def handle_legacy_grant_detail(request: web.Request) -> web.Response:
    """Old /grants/{state}/{city}/{category}/{slug}?id= URLs."""
    grant = load_grant(request)
    if grant is None:
        raise web.HTTPNotFound(text="Grant not found")
    raise web.HTTPMovedPermanently(grant_path(grant))


def legacy_listing_path(state: str, city: Optional[str] = None) -> Optional[str]:
    """
    Map an old /grants/{state}[/{city}] listing to its jurisdiction listing.

    Returns None when the state cannot be resolved.
    """
    if is_federal_state_value(state):
        return "/grants/federal"

    code, _ = resolve_state_param(state)
    if not code:
        return None
    if city is None or is_statewide_city(city):
        return f"/grants/state/{code}"
    return f"/grants/local/{code}/{slugify(city)}"


async def handle_legacy_listing(request: web.Request) -> web.Response:
    """Old /grants/{state}, /grants/{state}/{city} and /grants/{state}/{city}/{category} pages."""
    state = request.match_info["state"]
    city = request.match_info.get("city")
    target = legacy_listing_path(state, city)
    if target is None:
        raise web.HTTPNotFound(text=f"Unknown state: {state}")

    category_slug = slugify(request.match_info.get("category"))
    if category_slug:
        target = f"{target}?category={category_slug}"
    raise web.HTTPMovedPermanently(target)


async def handle_agencies(request: web.Request) -> web.Response:
    repository = _repository(request)
    query = _query_param(request, "q")
    agencies = repository.list_agencies(query)
    return aiohttp_jinja2.render_template(
        "agencies.html",
        request,
        {"title": "Funding Agencies", "agencies": agencies, "query": query or ""},
    )


async def handle_agency_detail(request: web.Request) -> web.Response:
    param = request.match_info["slug"]
    slug = slugify(param)
    if not slug:
        raise web.HTTPNotFound()
    if slug != param:
        raise web.HTTPMovedPermanently(f"/agencies/{slug}")

    repository = _repository(request)
    agency = repository.get_agency(slug)
    if agency is None:
        raise web.HTTPNotFound(text="Agency not found")

    settings = _settings(request)
    page = safe_number(request.query.get("page"), 1)
    result = repository.grants_for_agency(agency, page=page, page_size=settings.page_size)
    return aiohttp_jinja2.render_template(
        "agency_detail.html",
        request,
        {"title": agency.agency_name, "agency": agency, "result": result},
    )


async def handle_search_api(request: web.Request) -> web.Response:
    """JSON search endpoint used by the client-side search box."""
    filters = parse_filters(request)
    try:
        result = _repository(request).search(filters)
    except Exception as e:
        logger.exception("search_api_failed", error=str(e))
        return web.json_response(
            {
                "grants": [],
                "total": 0,
                "page": filters.page,
                "pageSize": filters.page_size,
                "totalPages": 0,
                "error": "Unable to fetch grants",
            },
            status=500,
        )

    payload = result.to_dict()
    for grant, row in zip(result.grants, payload["grants"]):
        row["path"] = grant_path(grant)
    return web.json_response(payload)


async def handle_sitemap(request: web.Request) -> web.Response:
    entries = build_sitemap_entries(_repository(request), _settings(request).site_url)
    return web.Response(
        text=render_sitemap_xml(entries),
        content_type="application/xml",
    )
