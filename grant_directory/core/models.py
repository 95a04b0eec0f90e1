"""
Data models for the grant directory.

Grant and Agency mirror the rows of the upstream data source. StateInfo and the
GrantLocation variants are derived data owned by the location resolver.
"""

from dataclasses import dataclass, field, asdict, fields
from enum import Enum
from typing import ClassVar, Optional, Union


class Jurisdiction(str, Enum):
    """Administrative scope of a funding opportunity."""
    FEDERAL = "federal"
    STATE = "state"
    LOCAL = "local"
    PRIVATE = "private"


@dataclass(frozen=True)
class StateInfo:
    """A US state or territory with its known aliases."""
    code: str  # 2-letter postal code
    name: str
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class FederalLocation:
    """Nationwide opportunity."""
    jurisdiction: ClassVar[Jurisdiction] = Jurisdiction.FEDERAL


@dataclass(frozen=True)
class StateLocation:
    """Statewide opportunity."""
    state_code: str
    jurisdiction: ClassVar[Jurisdiction] = Jurisdiction.STATE


@dataclass(frozen=True)
class LocalLocation:
    """Opportunity limited to one city or county."""
    state_code: str
    city_slug: str
    jurisdiction: ClassVar[Jurisdiction] = Jurisdiction.LOCAL


@dataclass(frozen=True)
class PrivateLocation:
    """Foundation or corporate funding."""
    jurisdiction: ClassVar[Jurisdiction] = Jurisdiction.PRIVATE


GrantLocation = Union[FederalLocation, StateLocation, LocalLocation, PrivateLocation]


def _from_row(cls, row: dict):
    """Build a dataclass from a raw row, ignoring unknown keys."""
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in row.items() if k in known})


@dataclass
class Grant:
    """
    A grant row as stored by the data source.

    The location resolver only reads id, title, state, city and category.
    The remaining fields feed listings, search and detail pages.
    """

    id: str
    title: str = ""
    state: Optional[str] = None
    city: Optional[str] = None
    category: Optional[str] = None

    summary: Optional[str] = None
    description: Optional[str] = None
    eligibility: Optional[str] = None
    funding_amount: Optional[str] = None
    deadline: Optional[str] = None
    apply_link: Optional[str] = None

    # Agency
    agency: Optional[str] = None
    agency_name: Optional[str] = None
    agency_code: Optional[str] = None
    agency_slug: Optional[str] = None

    # Source classification ("federal", "private", ...)
    type: Optional[str] = None
    base_type: Optional[str] = None

    opportunity_number: Optional[str] = None
    scraped_at: Optional[str] = None

    @classmethod
    def from_dict(cls, row: dict) -> "Grant":
        """Create a Grant from a data source row."""
        if row.get("id") is None:
            raise ValueError("Grant row is missing 'id'")
        grant = _from_row(cls, row)
        grant.id = str(grant.id)
        if grant.title is None:
            grant.title = ""
        return grant

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class Agency:
    """A funding agency with its canonical slug."""

    id: str
    slug: str
    agency_name: str
    agency_code: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class GrantFilters:
    """Search filters accepted by listings and the search API."""

    query: Optional[str] = None
    category: Optional[str] = None
    state: Optional[str] = None
    state_code: Optional[str] = None
    city: Optional[str] = None
    agency: Optional[str] = None
    agency_slug: Optional[str] = None
    has_apply_link: bool = False
    jurisdiction: Optional[Jurisdiction] = None
    page: int = 1
    page_size: int = 20


@dataclass
class SearchResult:
    """One page of grants plus totals."""

    grants: list[Grant] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20
    total_pages: int = 0

    def to_dict(self) -> dict:
        return {
            "grants": [g.to_dict() for g in self.grants],
            "total": self.total,
            "page": self.page,
            "pageSize": self.page_size,
            "totalPages": self.total_pages,
        }


@dataclass
class StateFacet:
    """A state that has at least one grant."""
    code: str
    label: str
    grant_count: int = 1


@dataclass
class FacetSets:
    """Distinct values offered in the filter dropdowns."""
    categories: list[str] = field(default_factory=list)
    states: list[str] = field(default_factory=list)
    agencies: list[str] = field(default_factory=list)
