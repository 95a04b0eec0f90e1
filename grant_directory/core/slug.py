"""
Canonical URL paths for grants and agencies.

Every grant has exactly one canonical path, derived from its jurisdiction,
title and id. Detail pages redirect permanently to it, so the builder must
return the same string for the same record every time.
"""

import hashlib
import re
from typing import Optional

from .location import GrantLike, read_field, infer_grant_location
from .models import (
    FederalLocation,
    GrantLocation,
    LocalLocation,
    PrivateLocation,
    StateLocation,
)
from .strings import slugify

SHORT_ID_LENGTH = 8
SHORT_ID_FALLBACK = "item"

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def short_id(grant_id: Optional[str]) -> str:
    """
    Derive a short, stable identifier from a record id.

    UUIDs yield their first segment ("3f2b8c1e-..." -> "3f2b8c1e"). Any other
    id yields the first 8 hex characters of its SHA-256 digest, so ids that
    share a prefix ("grant-001", "grant-002") stay distinct. Never returns
    an empty string.
    """
    raw = str(grant_id).strip() if grant_id is not None else ""
    if not raw:
        return SHORT_ID_FALLBACK

    if UUID_PATTERN.match(raw):
        return raw.split("-")[0].lower()

    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:SHORT_ID_LENGTH]


def grant_slug(title: Optional[str], grant_id: Optional[str]) -> str:
    """Title slug with the short id appended; the short id alone for blank titles."""
    base = slugify(title or "")
    suffix = short_id(grant_id)
    return f"{base}-{suffix}" if base else suffix


def short_id_from_slug(slug: Optional[str]) -> Optional[str]:
    """Recover the short id from the last segment of a grant slug."""
    if not isinstance(slug, str) or not slug.strip():
        return None
    last = slug.strip().rsplit("-", 1)[-1]
    return last.lower() or None


def build_path(location: GrantLocation, title: Optional[str], grant_id: Optional[str]) -> str:
    """
    Build the canonical relative path for a classified grant.

    Templates:
    - federal: /grants/federal/<slug>
    - state:   /grants/state/<CODE>/<slug>
    - local:   /grants/local/<CODE>/<city-slug>/<slug>
    - private: /grants/private/<slug>
    """
    slug = grant_slug(title, grant_id)

    if isinstance(location, StateLocation):
        return f"/grants/state/{location.state_code.upper()}/{slug}"
    if isinstance(location, LocalLocation):
        return f"/grants/local/{location.state_code.upper()}/{location.city_slug}/{slug}"
    if isinstance(location, PrivateLocation):
        return f"/grants/private/{slug}"
    return f"/grants/federal/{slug}"


def grant_path(grant: GrantLike) -> str:
    """Canonical path of a Grant or raw row."""
    return build_path(
        infer_grant_location(grant),
        read_field(grant, "title"),
        read_field(grant, "id"),
    )


def jurisdiction_index_path(location: GrantLocation) -> str:
    """Listing page that contains grants of the given location."""
    if isinstance(location, StateLocation):
        return f"/grants/state/{location.state_code.upper()}"
    if isinstance(location, LocalLocation):
        return f"/grants/local/{location.state_code.upper()}/{location.city_slug}"
    if isinstance(location, PrivateLocation):
        return "/grants/private"
    if isinstance(location, FederalLocation):
        return "/grants/federal"
    return "/grants"


def agency_path(slug: str) -> str:
    return f"/agencies/{slug}"


def category_path(category: Optional[str]) -> Optional[str]:
    slug = slugify(category)
    return f"/grants/category/{slug}" if slug else None


def derive_agency_slug(
    slug: Optional[str] = None,
    agency_code: Optional[str] = None,
    agency_name: Optional[str] = None,
    agency: Optional[str] = None,
) -> str:
    """Slugify the first non-blank candidate, in priority order."""
    for candidate in (slug, agency_code, agency_name, agency):
        if isinstance(candidate, str) and candidate.strip():
            return slugify(candidate.strip())
    return ""
