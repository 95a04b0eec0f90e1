"""Tests for data models."""

import dataclasses

import pytest

from grant_directory.core.models import (
    FederalLocation,
    Grant,
    Jurisdiction,
    LocalLocation,
    PrivateLocation,
    SearchResult,
    StateLocation,
)


class TestGrant:
    """Tests for Grant."""

    def test_from_dict_ignores_unknown_keys(self):
        grant = Grant.from_dict({"id": "1", "title": "T", "created_at": "2024-01-01", "extra": 5})
        assert grant.id == "1"
        assert grant.title == "T"
        assert not hasattr(grant, "extra")

    def test_from_dict_coerces_id(self):
        assert Grant.from_dict({"id": 42}).id == "42"

    def test_from_dict_null_title(self):
        assert Grant.from_dict({"id": "1", "title": None}).title == ""

    def test_from_dict_requires_id(self):
        with pytest.raises(ValueError):
            Grant.from_dict({"title": "No id"})

    def test_to_dict_drops_none(self):
        data = Grant(id="1", title="T", state="CA").to_dict()
        assert data == {"id": "1", "title": "T", "state": "CA"}


class TestLocations:
    """Tests for the GrantLocation variants."""

    def test_jurisdiction_tags(self):
        assert FederalLocation().jurisdiction == Jurisdiction.FEDERAL
        assert StateLocation("CA").jurisdiction == Jurisdiction.STATE
        assert LocalLocation("CA", "fresno").jurisdiction == Jurisdiction.LOCAL
        assert PrivateLocation().jurisdiction == Jurisdiction.PRIVATE

    def test_value_equality(self):
        assert LocalLocation("CA", "fresno") == LocalLocation("CA", "fresno")
        assert StateLocation("CA") != StateLocation("NV")
        assert FederalLocation() != PrivateLocation()

    def test_immutable(self):
        location = StateLocation("CA")
        with pytest.raises(dataclasses.FrozenInstanceError):
            location.state_code = "NV"

    def test_jurisdiction_is_str(self):
        assert Jurisdiction("local") is Jurisdiction.LOCAL
        assert Jurisdiction.FEDERAL == "federal"


class TestSearchResult:
    """Tests for SearchResult."""

    def test_to_dict_keys(self):
        result = SearchResult(grants=[Grant(id="1")], total=1, page=1, page_size=20, total_pages=1)
        data = result.to_dict()
        assert set(data) == {"grants", "total", "page", "pageSize", "totalPages"}
        assert data["grants"] == [{"id": "1", "title": ""}]
