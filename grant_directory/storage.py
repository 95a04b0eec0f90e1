"""
File-backed grant repository.

Reads grant (and optionally agency) rows exported by the data pipeline as a
JSON array or JSONL file, and answers the filter / sort / paginate queries the
pages need. Rows are loaded once and only read afterwards.
"""

import json
import re
from pathlib import Path
from typing import Iterable, Optional, Union

import structlog

from .core.agency import agencies_from_grants, agency_matches_grant, to_agency
from .core.models import Agency, FacetSets, Grant, GrantFilters, SearchResult
from .core.search import collect_facets, filter_grants_locally
from .core.slug import UUID_PATTERN, short_id

logger = structlog.get_logger(__name__)

UUID_PREFIX_PATTERN = re.compile(r"^[0-9a-f]{8}$")


def read_rows(path: Union[str, Path]) -> list[dict]:
    """
    Read rows from a JSON array or JSONL file.

    Args:
        path: File path; ".jsonl" files are read line by line

    Returns:
        List of row dicts

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a JSON file does not contain an array
    """
    filepath = Path(path)
    if not filepath.exists():
        raise FileNotFoundError(f"Data file not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        if filepath.suffix == ".jsonl":
            rows = []
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    rows.append(json.loads(line))
                except json.JSONDecodeError as e:
                    logger.warning("invalid_jsonl_line", path=str(filepath), line=line_no, error=str(e))
            return rows

        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array in {filepath}")
    return data


def normalize_grant_id(raw_id: Optional[str]) -> Optional[str]:
    """Strip a trailing "-<digits>" suffix and return the id if it is a UUID."""
    if not raw_id:
        return None
    cleaned = re.sub(r"-\d+$", "", raw_id.strip())
    return cleaned if UUID_PATTERN.match(cleaned) else None


class GrantRepository:
    """
    In-memory grant store with search and lookups.

    Grants are kept newest first (by scraped_at).
    """

    def __init__(self, grants: Iterable[Grant] = (), agencies: Optional[Iterable[Agency]] = None):
        self.grants: list[Grant] = sorted(grants, key=lambda g: g.scraped_at or "", reverse=True)
        self._by_id: dict[str, Grant] = {g.id: g for g in self.grants}
        self.agencies: list[Agency] = (
            list(agencies) if agencies is not None else agencies_from_grants(self.grants)
        )

    @classmethod
    def from_rows(cls, grant_rows: Iterable[dict], agency_rows: Optional[Iterable[dict]] = None) -> "GrantRepository":
        """Build a repository from raw rows, skipping malformed ones."""
        grants = []
        for row in grant_rows:
            try:
                grants.append(Grant.from_dict(row))
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning("grant_row_skipped", row_id=row.get("id") if isinstance(row, dict) else None, error=str(e))

        agencies = None
        if agency_rows is not None:
            agencies = [a for a in (to_agency(r) for r in agency_rows) if a]

        return cls(grants, agencies)

    @classmethod
    def from_files(cls, grants_path: Union[str, Path], agencies_path: Optional[Union[str, Path]] = None) -> "GrantRepository":
        """Load grants (and agencies, if given) from exported files."""
        grant_rows = read_rows(grants_path)
        agency_rows = read_rows(agencies_path) if agencies_path else None
        repo = cls.from_rows(grant_rows, agency_rows)
        logger.info(
            "repository_loaded",
            path=str(grants_path),
            grants=len(repo.grants),
            agencies=len(repo.agencies),
        )
        return repo

    def __len__(self) -> int:
        return len(self.grants)

    def search(self, filters: Optional[GrantFilters] = None) -> SearchResult:
        return filter_grants_locally(self.grants, filters)

    def facets(self) -> FacetSets:
        return collect_facets(self.grants)

    def get_by_id(self, grant_id: Optional[str]) -> Optional[Grant]:
        """
        Find a grant by full id.

        Tries the raw id, then the normalized UUID, then falls back to the
        leading segment when it looks like the start of a UUID.
        """
        if not grant_id or not grant_id.strip():
            return None
        raw = grant_id.strip()

        grant = self._by_id.get(raw)
        if grant:
            return grant

        normalized = normalize_grant_id(raw)
        if normalized:
            grant = self._by_id.get(normalized) or self._by_id.get(normalized.lower())
            if grant:
                return grant
        else:
            logger.debug("non_uuid_grant_id", id=raw)

        prefix = raw.split("-")[0].lower()
        if UUID_PREFIX_PATTERN.match(prefix):
            return self.get_by_short_id(prefix)
        return None

    def find_by_short_id(self, short: Optional[str]) -> list[Grant]:
        """All grants whose short id matches, newest first."""
        target = short.strip().lower() if isinstance(short, str) else ""
        if not target:
            return []
        return [g for g in self.grants if short_id(g.id) == target]

    def get_by_short_id(self, short: Optional[str]) -> Optional[Grant]:
        """Newest grant whose short id matches."""
        matches = self.find_by_short_id(short)
        return matches[0] if matches else None

    def list_agencies(self, query: Optional[str] = None) -> list[Agency]:
        """Agencies sorted by name, optionally filtered by slug/name/code."""
        agencies = sorted(self.agencies, key=lambda a: a.agency_name.lower())
        q = query.strip().lower() if isinstance(query, str) else ""
        if not q:
            return agencies
        return [
            a for a in agencies
            if q in a.slug or q in a.agency_name.lower() or (a.agency_code and q in a.agency_code.lower())
        ]

    def get_agency(self, slug: Optional[str]) -> Optional[Agency]:
        target = slug.strip().lower() if isinstance(slug, str) else ""
        if not target:
            return None
        for agency in self.agencies:
            if agency.slug == target:
                return agency
        return None

    def grants_for_agency(self, agency: Agency, page: int = 1, page_size: int = 20) -> SearchResult:
        matched = [g for g in self.grants if agency_matches_grant(agency, g)]
        return filter_grants_locally(matched, GrantFilters(page=page, page_size=page_size))
