"""
Sitemap generation.

Every entry is a canonical path, so crawlers never see the legacy or
query-string URLs that the site redirects away from.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from xml.sax.saxutils import escape

import structlog

from .core.location import infer_grant_location
from .core.models import Jurisdiction
from .core.search import aggregate_state_facets
from .core.slug import agency_path, category_path, grant_path, jurisdiction_index_path
from .storage import GrantRepository

logger = structlog.get_logger(__name__)

STATIC_PATHS = ("/grants", "/grants/federal", "/grants/private", "/agencies")


@dataclass
class SitemapEntry:
    """One <url> element."""
    path: str
    url: str
    last_modified: str

    def to_dict(self) -> dict:
        return {"path": self.path, "url": self.url, "lastModified": self.last_modified}


def create_entry(path: str, site_url: str, last_modified: Optional[str] = None) -> SitemapEntry:
    """Absolute sitemap entry for a relative path."""
    path = path if path.startswith("/") else f"/{path}"
    base = site_url.rstrip("/")
    return SitemapEntry(
        path=path,
        url=f"{base}{path}",
        last_modified=last_modified or datetime.now(timezone.utc).isoformat(),
    )


def build_sitemap_entries(
    repository: GrantRepository,
    site_url: str,
    exclude: tuple[Jurisdiction, ...] = (),
) -> list[SitemapEntry]:
    """
    Collect listing, state, local, category, agency and grant paths.

    Args:
        repository: Loaded grant repository
        site_url: Absolute site root, e.g. "https://www.grantdirectory.org"
        exclude: Jurisdictions whose grant detail pages are left out

    Returns:
        Entries in a stable order with duplicate paths removed
    """
    paths: dict[str, Optional[str]] = {p: None for p in STATIC_PATHS}

    for facet in aggregate_state_facets(repository.grants):
        paths.setdefault(f"/grants/state/{facet.code}", None)

    for grant in repository.grants:
        location = infer_grant_location(grant)
        paths.setdefault(jurisdiction_index_path(location), None)
        category = category_path(grant.category)
        if category:
            paths.setdefault(category, None)

    for agency in repository.list_agencies():
        paths.setdefault(agency_path(agency.slug), None)

    grant_count = 0
    for grant in repository.grants:
        if infer_grant_location(grant).jurisdiction in exclude:
            continue
        paths[grant_path(grant)] = grant.scraped_at
        grant_count += 1

    logger.info("sitemap_built", entries=len(paths), grants=grant_count)
    return [create_entry(path, site_url, modified) for path, modified in paths.items()]


def render_sitemap_xml(entries: list[SitemapEntry]) -> str:
    """Serialize entries as a sitemaps.org urlset document."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
    ]
    for entry in entries:
        lines.append(
            f"  <url><loc>{escape(entry.url)}</loc>"
            f"<lastmod>{escape(entry.last_modified)}</lastmod></url>"
        )
    lines.append("</urlset>")
    return "\n".join(lines) + "\n"
