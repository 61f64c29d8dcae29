"""Integrations API tests."""

from unittest.mock import patch
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.company import Company
from app.models.integration_sync_history import IntegrationSyncHistory
from app.repositories.api_key_repository import ApiKeyRepository
from app.schemas.api_key import ApiKeyCreate
from app.services.integrations.async_jobs import AsyncJobTracker
from app.services.integrations.campaign_push import CampaignPushCoordinator
from tests.conftest import create_integration
from tests.test_campaign_push import create_campaign, kevel_api

OTHER_COMPANY_ID = UUID("00000000-0000-0000-0000-000000000002")


@pytest.fixture
def other_client(db_session):
    """Client authenticated as a second company."""
    db_session.add(Company(id=OTHER_COMPANY_ID, name="Other Company"))
    db_session.commit()
    _, raw_key = ApiKeyRepository(db_session).create(OTHER_COMPANY_ID, ApiKeyCreate(name="Other"))
    test_client = TestClient(app)
    test_client.headers["Authorization"] = f"Bearer {raw_key}"
    return test_client


def _create(client, **overrides):
    payload = {
        "name": "Kevel Network",
        "integration_type": "ad_server",
        "provider_type": "kevel",
        "credentials": {"api_key": "kv_key"},
        "configuration": {"network_id": 99},
    }
    payload.update(overrides)
    response = client.post("/v1/integrations/", json=payload)
    assert response.status_code == 201
    return response.json()


class TestAuthentication:
    def test_missing_header(self):
        response = TestClient(app).get("/v1/integrations/")
        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": "unauthorized",
            "detail": "Authorization header is required",
        }
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_key(self):
        response = TestClient(app).get(
            "/v1/integrations/", headers={"Authorization": "Bearer not-a-key"}
        )
        assert response.status_code == 401

    def test_malformed_header(self):
        response = TestClient(app).get("/v1/integrations/", headers={"Authorization": "Token x"})
        assert response.status_code == 401


class TestIntegrationCrud:
    def test_create(self, client):
        data = _create(client)
        assert data["provider_type"] == "kevel"
        assert data["status"] == "active"
        assert data["configuration"] == {"network_id": 99}
        assert "credentials" not in data

    def test_create_unknown_provider(self, client):
        response = client.post(
            "/v1/integrations/",
            json={"name": "Zoho", "integration_type": "crm", "provider_type": "zoho"},
        )
        assert response.status_code == 422

    def test_list_with_total_count(self, client):
        _create(client, name="B")
        _create(client, name="A")

        response = client.get("/v1/integrations/", params={"order_by": "name"})

        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "2"
        assert [i["name"] for i in response.json()] == ["A", "B"]

    def test_get(self, client):
        created = _create(client)
        response = client.get(f"/v1/integrations/{created['id']}")
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    def test_get_not_found(self, client):
        response = client.get(f"/v1/integrations/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_update(self, client):
        created = _create(client)
        response = client.put(
            f"/v1/integrations/{created['id']}",
            json={"name": "Renamed", "configuration": {"network_id": 100}},
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"
        assert response.json()["configuration"] == {"network_id": 100}

    def test_other_company_cannot_see_integration(self, client, other_client):
        created = _create(client)
        for method, suffix in (("get", ""), ("delete", ""), ("post", "/sync")):
            response = getattr(other_client, method)(f"/v1/integrations/{created['id']}{suffix}")
            assert response.status_code == 404
        assert other_client.get("/v1/integrations/").json() == []


class TestSyncEndpoint:
    def test_sync_stub_provider(self, client, db_session):
        created = _create(
            client, name="Pipedrive", integration_type="crm", provider_type="pipedrive"
        )

        response = client.post(f"/v1/integrations/{created['id']}/sync")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["provider"] == "pipedrive"
        assert data["status"] == "completed"
        assert data["synced"] == 0
        assert set(data["details"]) == {"opportunities", "contacts", "advertisers", "inventory"}

        history = client.get(f"/v1/integrations/{created['id']}/sync_history").json()
        assert len(history) == 1
        assert history[0]["id"] == data["history_id"]

    def test_sync_single_entity(self, client):
        created = _create(client, name="VTEX", integration_type="crm", provider_type="vtex")
        response = client.post(
            f"/v1/integrations/{created['id']}/sync", json={"sync_type": "contacts"}
        )
        assert response.status_code == 200
        assert list(response.json()["details"]) == ["contacts"]

    def test_sync_invalid_type(self, client):
        created = _create(client)
        response = client.post(
            f"/v1/integrations/{created['id']}/sync", json={"sync_type": "everything"}
        )
        assert response.status_code == 422

    def test_sync_history_filters(self, client, db_session):
        created = _create(
            client, name="Pipedrive", integration_type="crm", provider_type="pipedrive"
        )
        client.post(f"/v1/integrations/{created['id']}/sync")
        client.post(f"/v1/integrations/{created['id']}/sync", json={"sync_type": "contacts"})

        url = f"/v1/integrations/{created['id']}/sync_history"
        response = client.get(url)
        assert len(response.json()) == 2
        assert response.headers["X-Total-Count"] == "2"
        contacts = client.get(url, params={"sync_type": "contacts"})
        assert len(contacts.json()) == 1
        assert contacts.headers["X-Total-Count"] == "1"
        assert client.get(url, params={"status": "failed"}).json() == []
        assert client.get(url, params={"status": "exploded"}).status_code == 422
        assert db_session.query(IntegrationSyncHistory).count() == 2


class TestForecastEndpoints:
    def test_invalid_job_spec(self, client):
        created = _create(client)
        response = client.post(
            f"/v1/integrations/{created['id']}/forecasts", json={"job_kind": "available"}
        )
        assert response.status_code == 422
        assert response.json()["error"] == "invalid_job_spec"

    def test_provider_without_forecasting(self, client):
        created = _create(
            client, name="SF", integration_type="crm", provider_type="salesforce", credentials={}
        )
        response = client.post(
            f"/v1/integrations/{created['id']}/forecasts",
            json={"job_kind": "existing", "end_date": "2026-12-31"},
        )
        assert response.status_code == 422
        assert response.json()["error"] == "unsupported_capability"

    def test_start_and_poll(self, client, fake_provider):
        created = _create(client)
        fake_provider.on("POST", "/v1/forecaster/", {"id": "fc-9", "status": "queued"})
        fake_provider.on(
            "GET",
            "/v1/forecaster/fc-9",
            {"id": "fc-9", "status": "finished", "progress": 1, "result": {"Impressions": 10}},
        )

        with patch(
            "app.routers.integrations.AsyncJobTracker",
            lambda: AsyncJobTracker(transport=fake_provider.transport),
        ):
            started = client.post(
                f"/v1/integrations/{created['id']}/forecasts",
                json={"job_kind": "existing", "end_date": "2026-12-31"},
            )
            polled = client.get(f"/v1/integrations/{created['id']}/forecasts/fc-9")

        assert started.status_code == 202
        assert started.json() == {"job_id": "fc-9", "status": "queued", "progress": None, "result": None}
        assert polled.status_code == 200
        assert polled.json()["status"] == "finished"
        assert polled.json()["result"] == {"Impressions": 10}


class TestCampaignEndpoints:
    def test_toggle_without_push(self, client, db_session):
        created = _create(client)
        campaign = create_campaign(db_session)

        response = client.post(
            f"/v1/integrations/{created['id']}/campaigns/{campaign.id}/toggle",
            json={"activate": True},
        )

        assert response.status_code == 409
        assert response.json()["error"] == "not_pushed"

    def test_push_unknown_campaign(self, client):
        created = _create(client)
        response = client.post(f"/v1/integrations/{created['id']}/campaigns/{uuid4()}/push")
        assert response.status_code == 404

    def test_push_then_toggle(self, client, db_session, fake_provider):
        created = _create(client)
        campaign = create_campaign(db_session)
        kevel_api(fake_provider, advertisers=[{"Id": 5}])
        fake_provider.on("GET", "/v1/campaign/500/flight", {"items": []})

        with patch(
            "app.routers.integrations.CampaignPushCoordinator",
            lambda db: CampaignPushCoordinator(db, transport=fake_provider.transport),
        ):
            pushed = client.post(
                f"/v1/integrations/{created['id']}/campaigns/{campaign.id}/push"
            )
            toggled = client.post(
                f"/v1/integrations/{created['id']}/campaigns/{campaign.id}/toggle",
                json={"activate": False},
            )

        assert pushed.status_code == 200
        assert pushed.json()["external_campaign_id"] == "500"
        assert pushed.json()["sub_units_created"] == 3
        assert pushed.json()["created"] is True
        assert toggled.status_code == 200
        assert toggled.json()["status"] == "paused"

        response = client.get(f"/v1/integrations/{created['id']}/mappings")
        assert response.headers["X-Total-Count"] == "1"
        mappings = response.json()
        assert len(mappings) == 1
        assert mappings[0]["mappable_id"] == str(campaign.id)
        assert (
            client.get(
                f"/v1/integrations/{created['id']}/mappings", params={"mappable_type": "ad_space"}
            ).json()
            == []
        )


class TestDeleteEndpoint:
    def test_delete_returns_counts(self, client, db_session):
        created = _create(client)
        integration_id = UUID(created["id"])
        create_campaign(db_session, name="Local")

        response = client.delete(f"/v1/integrations/{integration_id}")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "deleted_counts": {
                "mappings": 0,
                "history": 0,
                "campaigns": 0,
                "ad_spaces": 0,
                "integration": 1,
            },
        }
        assert client.get(f"/v1/integrations/{integration_id}").status_code == 404
        assert client.get("/v1/campaigns/").headers["X-Total-Count"] == "1"

    def test_delete_after_sync_counts_history(self, client, db_session):
        integration = create_integration(db_session, "pipedrive")
        client.post(f"/v1/integrations/{integration.id}/sync")

        response = client.delete(f"/v1/integrations/{integration.id}")

        assert response.json()["deleted_counts"]["history"] == 1
        audit = client.get(f"/v1/audit_logs/integration/{integration.id}").json()
        assert "deleted" in {entry["action"] for entry in audit}


    def test_delete_removes_campaigns_created_for_it(self, client):
        created = _create(client)
        kept = client.post(
            "/v1/campaigns/",
            json={"name": "Local", "start_date": "2026-12-01", "end_date": "2026-12-31"},
        ).json()
        derived = client.post(
            "/v1/campaigns/",
            json={
                "name": "Kevel Takeover",
                "description": "Imported from Kevel",
                "start_date": "2026-12-01",
                "end_date": "2026-12-31",
                "integration_id": created["id"],
            },
        )
        assert derived.status_code == 201
        assert derived.json()["integration_id"] == created["id"]

        response = client.delete(f"/v1/integrations/{created['id']}")

        assert response.json()["deleted_counts"]["campaigns"] == 1
        remaining = client.get("/v1/campaigns/").json()
        assert [c["id"] for c in remaining] == [kept["id"]]


class TestCampaignProvenance:
    def _payload(self, integration_id):
        return {
            "name": "Derived",
            "start_date": "2026-12-01",
            "end_date": "2026-12-31",
            "integration_id": str(integration_id),
        }

    def test_unknown_integration(self, client):
        response = client.post("/v1/campaigns/", json=self._payload(uuid4()))
        assert response.status_code == 404

    def test_integration_of_other_company(self, client, other_client):
        created = _create(client)
        response = other_client.post("/v1/campaigns/", json=self._payload(created["id"]))
        assert response.status_code == 404
        assert other_client.get("/v1/campaigns/").json() == []
