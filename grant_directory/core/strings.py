"""
Text normalization for URL slugs and display labels.
"""

import re
from typing import Optional

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_WORD_SEPARATORS = re.compile(r"[-_\s]+")


def slugify(text: Optional[str]) -> str:
    """
    Convert text to a URL-safe slug.

    Examples:
    - "Small Business & Startups" -> "small-business-and-startups"
    - "  Washington, D.C. " -> "washington-d-c"

    Args:
        text: Any human-readable text

    Returns:
        Lowercase hyphenated slug, or "" for empty input
    """
    if not text or not isinstance(text, str):
        return ""

    slug = text.lower().replace("&", " and ")
    slug = _NON_ALNUM.sub("-", slug)
    return slug.strip("-")


def words_from_slug(value: Optional[str]) -> str:
    """Turn a slug back into title-cased words ("los-angeles" -> "Los Angeles")."""
    if not value:
        return ""
    parts = [p for p in _WORD_SEPARATORS.split(value) if p]
    return " ".join(p[0].upper() + p[1:] for p in parts)


def normalize_category(value: Optional[str]) -> str:
    """Normalize a free-text category into a display label, "Other" when blank."""
    if not isinstance(value, str) or not value.strip():
        return "Other"

    sanitized = re.sub(r"[_\s]+", "-", value.strip()).lower()
    return words_from_slug(sanitized) or "Other"
