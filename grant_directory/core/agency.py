"""
Agency slugs and agency-to-grant matching.
"""

from dataclasses import dataclass, field
from typing import Optional

from .models import Agency, Grant
from .slug import derive_agency_slug


@dataclass
class AgencySlugCandidates:
    """Ways a slug may appear in agency_code / agency_name columns."""
    slug: str = ""
    name_fragment: str = ""
    code_candidates: list[str] = field(default_factory=list)


def agency_slug_candidates(slug: Optional[str]) -> AgencySlugCandidates:
    """
    Expand a slug into code and name candidates.

    "hhs-acf" -> codes ["hhs-acf", "HHS-ACF", "hhsacf", "HHSACF"],
    name fragment "hhs acf"
    """
    normalized = slug.strip().lower() if isinstance(slug, str) else ""
    if not normalized:
        return AgencySlugCandidates()

    collapsed = " ".join(normalized.replace("-", " ").split())
    no_hyphen = normalized.replace("-", "")
    codes = [normalized, normalized.upper()]
    if no_hyphen:
        codes += [no_hyphen, no_hyphen.upper()]

    return AgencySlugCandidates(
        slug=normalized,
        name_fragment=collapsed,
        code_candidates=list(dict.fromkeys(codes)),
    )


def to_agency(row: Optional[dict], fallback_slug: Optional[str] = None) -> Optional[Agency]:
    """
    Normalize an agency row.

    The slug comes from the row (slug, code, name), then the fallback,
    then the row id, so every agency gets a usable URL.
    """
    if not row:
        return None

    agency_name = row.get("agency_name") or row.get("name")
    slug = (
        derive_agency_slug(
            slug=row.get("slug"),
            agency_code=row.get("agency_code"),
            agency_name=agency_name,
        )
        or derive_agency_slug(slug=fallback_slug)
        or derive_agency_slug(slug=str(row.get("id") or ""))
        or str(row.get("id") or "")
    )
    name = agency_name.strip() if isinstance(agency_name, str) else ""

    return Agency(
        id=str(row.get("id") or slug),
        slug=slug,
        agency_name=name or slug,
        agency_code=row.get("agency_code"),
        description=row.get("description"),
        website=row.get("website"),
    )


def grant_agency_slug(grant: Grant) -> str:
    """Slug of the agency that issued a grant, "" when unknown."""
    return derive_agency_slug(
        slug=grant.agency_slug,
        agency_code=grant.agency_code,
        agency_name=grant.agency_name,
        agency=grant.agency,
    )


def agency_matches_grant(agency: Agency, grant: Grant) -> bool:
    """True when a grant belongs to the agency by slug, code or name."""
    if grant_agency_slug(grant) == agency.slug:
        return True

    if agency.agency_code and grant.agency_code:
        codes = {c.lower() for c in agency_slug_candidates(agency.agency_code).code_candidates}
        if grant.agency_code.strip().lower() in codes:
            return True

    fragments = {agency.agency_name.strip().lower(), agency_slug_candidates(agency.slug).name_fragment}
    fragments.discard("")
    for text in (grant.agency_name, grant.agency):
        if not isinstance(text, str):
            continue
        lowered = text.lower()
        if any(fragment in lowered for fragment in fragments):
            return True
    return False


def agencies_from_grants(grants: list[Grant]) -> list[Agency]:
    """Build agency entries from grants when no agency table is available."""
    seen: dict[str, Agency] = {}
    for grant in grants:
        slug = grant_agency_slug(grant)
        if not slug or slug in seen:
            continue
        name = grant.agency_name or grant.agency or grant.agency_code or slug
        seen[slug] = Agency(id=slug, slug=slug, agency_name=name.strip(), agency_code=grant.agency_code)
    return sorted(seen.values(), key=lambda a: a.agency_name.lower())
