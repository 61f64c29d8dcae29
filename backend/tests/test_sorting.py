"""Tests for the order_by query parameter."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core.sorting import apply_order_by, sortable_fields
from app.models.advertiser import Advertiser
from app.models.integration import Integration
from tests.conftest import DEFAULT_COMPANY_ID, create_integration


@pytest.fixture
def advertisers(db_session: Session):
    for name in ("Globex", "Acme", "Initech"):
        db_session.add(Advertiser(company_id=DEFAULT_COMPANY_ID, name=name, source="kevel"))
    db_session.commit()


def _names(db_session: Session, order_by: str | None, **kwargs) -> list[str]:
    query = db_session.query(Advertiser).filter(Advertiser.company_id == DEFAULT_COMPANY_ID)
    return [a.name for a in apply_order_by(query, Advertiser, order_by, **kwargs).all()]


# ---------------------------------------------------------------------------
# Unit tests for the apply_order_by utility
# ---------------------------------------------------------------------------


class TestApplyOrderBy:
    """Tests for the core sorting utility function."""

    def test_sort_by_valid_field_asc(self, db_session: Session, advertisers):
        assert _names(db_session, "name:asc") == ["Acme", "Globex", "Initech"]

    def test_sort_by_valid_field_desc(self, db_session: Session, advertisers):
        assert _names(db_session, "name:desc") == ["Initech", "Globex", "Acme"]

    def test_no_direction_defaults_to_asc(self, db_session: Session, advertisers):
        assert _names(db_session, "name") == ["Acme", "Globex", "Initech"]

    def test_invalid_direction_falls_back_to_default(self, db_session: Session, advertisers):
        """An unknown direction keeps the field but uses the default direction."""
        assert _names(db_session, "name:sideways") == ["Initech", "Globex", "Acme"]

    def test_invalid_field_falls_back_to_default(self, db_session: Session, advertisers):
        names = _names(db_session, "nonexistent:asc", default_field="name", default_direction="asc")
        assert names == ["Acme", "Globex", "Initech"]

    def test_empty_string_uses_default(self, db_session: Session, advertisers):
        names = _names(db_session, "", default_field="name", default_direction="desc")
        assert names == ["Initech", "Globex", "Acme"]

    def test_default_sort_created_at_desc(self, db_session: Session, advertisers):
        assert len(_names(db_session, None)) == 3


class TestSortableFields:
    def test_secrets_and_json_are_not_sortable(self):
        fields = sortable_fields(Integration)
        assert "name" in fields
        assert "provider_type" in fields
        assert "credentials" not in fields
        assert "configuration" not in fields
        assert "error_details" not in fields

    def test_sorting_by_credentials_is_ignored(self, db_session: Session):
        create_integration(db_session, "kevel", name="b", credentials={"api_key": "a"})
        create_integration(db_session, "kevel", name="a", credentials={"api_key": "b"})
        query = db_session.query(Integration)
        sorted_query = apply_order_by(
            query, Integration, "credentials:asc", default_field="name", default_direction="asc"
        )
        assert [i.name for i in sorted_query.all()] == ["a", "b"]


# ---------------------------------------------------------------------------
# API tests for sorting via the records endpoints
# ---------------------------------------------------------------------------


class TestRecordsSorting:
    def test_advertisers_by_name(self, client: TestClient, advertisers):
        response = client.get("/v1/records/advertisers", params={"order_by": "name:asc"})
        assert response.status_code == 200
        assert [a["name"] for a in response.json()] == ["Acme", "Globex", "Initech"]

    def test_advertisers_by_name_desc(self, client: TestClient, advertisers):
        response = client.get("/v1/records/advertisers", params={"order_by": "name:desc"})
        assert [a["name"] for a in response.json()] == ["Initech", "Globex", "Acme"]

    def test_unknown_field_is_ignored(self, client: TestClient, advertisers):
        response = client.get("/v1/records/advertisers", params={"order_by": "bogus:asc"})
        assert response.status_code == 200
        assert len(response.json()) == 3
