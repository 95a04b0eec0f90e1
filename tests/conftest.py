"""Shared fixtures: a small set of grants covering every jurisdiction."""

import pytest

from grant_directory.core.models import Grant
from grant_directory.storage import GrantRepository


FEDERAL_ID = "3f2b8c1e-4a5d-4c1b-9e2f-0a1b2c3d4e5f"
STATE_ID = "a1c9e4b2-7d3f-4e8a-b5c6-1d2e3f4a5b6c"
LOCAL_ID = "b7e2d5f1-2c4a-4b9d-8e1f-3a4b5c6d7e8f"
PRIVATE_ID = "c4d8a2e6-9b1f-4c3d-a7e5-5f6a7b8c9d0e"
DC_ID = "d9f3b7c1-5e2a-4d6b-9c8f-7a8b9c0d1e2f"


@pytest.fixture
def grant_rows():
    """Raw rows as exported by the data pipeline."""
    return [
        {
            "id": FEDERAL_ID,
            "title": "Community Arts & Culture Fund",
            "state": "Federal",
            "city": None,
            "category": "Arts Culture",
            "agency": "National Endowment for the Arts",
            "agency_code": "NEA",
            "apply_link": "https://www.arts.gov/grants",
            "scraped_at": "2025-09-01T00:00:00Z",
        },
        {
            "id": STATE_ID,
            "title": "California Small Business Recovery Grant",
            "state": "CA",
            "city": "Statewide",
            "category": "Small Business",
            "agency": "California Office of the Small Business Advocate",
            "scraped_at": "2025-08-15T00:00:00Z",
        },
        {
            "id": LOCAL_ID,
            "title": "Sacramento Neighborhood Improvement Grant",
            "state": "California",
            "city": "Sacramento",
            "category": "Community Development",
            "agency": "City of Sacramento",
            "scraped_at": "2025-07-20T00:00:00Z",
        },
        {
            "id": PRIVATE_ID,
            "title": "Youth STEM Foundation Award",
            "state": "NY",
            "city": "New York",
            "category": "Education",
            "agency": "Example Family Foundation",
            "type": "private",
            "scraped_at": "2025-06-10T00:00:00Z",
        },
        {
            "id": DC_ID,
            "title": "DC Housing Assistance Program",
            "state": "Washington, DC",
            "city": "N/A",
            "category": "Housing",
            "agency": "DC Department of Housing and Community Development",
            "scraped_at": "2025-05-05T00:00:00Z",
        },
    ]


@pytest.fixture
def grants(grant_rows):
    return [Grant.from_dict(row) for row in grant_rows]


@pytest.fixture
def repository(grant_rows):
    return GrantRepository.from_rows(grant_rows)
