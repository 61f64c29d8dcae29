"""API tests for companies, campaigns, records and audit logs."""

from uuid import uuid4

from fastapi.testclient import TestClient

from app.main import app
from app.models.ad_space import AdSpace
from app.models.audit_log import AuditAction
from app.models.campaign_ad_space import CampaignAdSpace
from app.models.contact import Contact
from app.models.opportunity import Opportunity
from app.services.audit_service import AuditService
from tests.conftest import DEFAULT_COMPANY_ID


def _campaign_payload(**overrides):
    payload = {
        "name": "Winter Takeover",
        "start_date": "2026-12-01",
        "end_date": "2026-12-31",
        "budget_cents": 500000,
    }
    payload.update(overrides)
    return payload


class TestRoot:
    def test_root(self):
        response = TestClient(app).get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"


class TestCompaniesAPI:
    def test_create_company_returns_first_key(self):
        test_client = TestClient(app)
        response = test_client.post("/v1/companies/", json={"name": "Acme Media"})

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Acme Media"
        raw_key = data["api_key"]["raw_key"]
        assert raw_key

        current = test_client.get(
            "/v1/companies/current", headers={"Authorization": f"Bearer {raw_key}"}
        )
        assert current.status_code == 200
        assert current.json()["id"] == data["id"]

    def test_get_current(self, client):
        response = client.get("/v1/companies/current")
        assert response.status_code == 200
        assert response.json()["id"] == str(DEFAULT_COMPANY_ID)

    def test_create_and_revoke_api_key(self, client):
        created = client.post("/v1/companies/current/api_keys", json={"name": "CI"})
        assert created.status_code == 201
        key = created.json()

        revoked = client.delete(f"/v1/companies/current/api_keys/{key['id']}")
        assert revoked.status_code == 204

        response = TestClient(app).get(
            "/v1/companies/current", headers={"Authorization": f"Bearer {key['raw_key']}"}
        )
        assert response.status_code == 401

    def test_revoke_unknown_key(self, client):
        response = client.delete(f"/v1/companies/current/api_keys/{uuid4()}")
        assert response.status_code == 404


class TestCampaignsAPI:
    def test_create_and_get(self, client):
        response = client.post("/v1/campaigns/", json=_campaign_payload())
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "draft"
        assert data["integration_id"] is None

        fetched = client.get(f"/v1/campaigns/{data['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["name"] == "Winter Takeover"

    def test_create_with_ad_spaces(self, client, db_session):
        ad_space = AdSpace(company_id=DEFAULT_COMPANY_ID, name="Homepage - Leaderboard")
        db_session.add(ad_space)
        db_session.commit()

        response = client.post(
            "/v1/campaigns/", json=_campaign_payload(ad_space_ids=[str(ad_space.id)])
        )

        assert response.status_code == 201
        assert db_session.query(CampaignAdSpace).count() == 1

    def test_unknown_ad_space(self, client):
        response = client.post("/v1/campaigns/", json=_campaign_payload(ad_space_ids=[str(uuid4())]))
        assert response.status_code == 404

    def test_end_before_start(self, client):
        response = client.post(
            "/v1/campaigns/", json=_campaign_payload(start_date="2026-12-31", end_date="2026-12-01")
        )
        assert response.status_code == 422

    def test_list_and_filter(self, client):
        client.post("/v1/campaigns/", json=_campaign_payload(name="One"))
        client.post("/v1/campaigns/", json=_campaign_payload(name="Two", status="active"))

        response = client.get("/v1/campaigns/")
        assert response.headers["X-Total-Count"] == "2"
        active = client.get("/v1/campaigns/", params={"status": "active"}).json()
        assert [c["name"] for c in active] == ["Two"]

    def test_update(self, client):
        created = client.post("/v1/campaigns/", json=_campaign_payload()).json()
        response = client.put(f"/v1/campaigns/{created['id']}", json={"status": "paused"})
        assert response.status_code == 200
        assert response.json()["status"] == "paused"

    def test_get_not_found(self, client):
        assert client.get(f"/v1/campaigns/{uuid4()}").status_code == 404


class TestRecordsAPI:
    def test_opportunities_with_source_filter(self, client, db_session):
        for source in ("salesforce", "hubspot"):
            db_session.add(
                Opportunity(
                    company_id=DEFAULT_COMPANY_ID,
                    natural_key=f"{source} deal",
                    name=f"{source} deal",
                    source=source,
                )
            )
        db_session.commit()

        response = client.get("/v1/records/opportunities")
        assert response.headers["X-Total-Count"] == "2"
        filtered = client.get("/v1/records/opportunities", params={"source": "hubspot"}).json()
        assert [o["name"] for o in filtered] == ["hubspot deal"]

    def test_contacts(self, client, db_session):
        db_session.add(
            Contact(
                company_id=DEFAULT_COMPANY_ID,
                natural_key="ada@example.com",
                email="ada@example.com",
                source="hubspot",
            )
        )
        db_session.commit()
        data = client.get("/v1/records/contacts").json()
        assert data[0]["email"] == "ada@example.com"

    def test_empty_lists(self, client):
        for path in ("advertisers", "ad_spaces"):
            response = client.get(f"/v1/records/{path}")
            assert response.status_code == 200
            assert response.json() == []
            assert response.headers["X-Total-Count"] == "0"


class TestAuditLogsAPI:
    def test_list_and_filter(self, client, db_session, kevel_integration):
        audit = AuditService(db_session)
        audit.log_for(kevel_integration, AuditAction.SYNCED, metadata={"synced": 4})
        audit.log_status_change(kevel_integration, "active", "error")

        response = client.get("/v1/audit_logs/")
        assert response.headers["X-Total-Count"] == "2"
        assert {entry["action"] for entry in response.json()} == {"synced", "status_changed"}
        changes = client.get("/v1/audit_logs/", params={"action": "status_changed"}).json()
        assert len(changes) == 1
        assert changes[0]["changes"]["status"] == {"old": "active", "new": "error"}

        trail = client.get(f"/v1/audit_logs/integration/{kevel_integration.id}").json()
        assert len(trail) == 2
        synced = next(entry for entry in trail if entry["action"] == "synced")
        assert synced["metadata"] == {"synced": 4}

    def test_unknown_filters_are_rejected(self, client):
        assert client.get("/v1/audit_logs/", params={"action": "renamed"}).status_code == 422
        assert client.get(f"/v1/audit_logs/plan/{uuid4()}").status_code == 422
