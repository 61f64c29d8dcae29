"""HubSpot sync through the CRM v3 objects API: paging, translation and failures."""

import httpx
import pytest

from app.models.advertiser import Advertiser
from app.models.contact import Contact
from app.models.opportunity import Opportunity
from app.services.integrations.orchestrator import SyncOrchestrator
from tests.conftest import create_integration

DEALS = [
    [
        {"id": "d1", "properties": {"dealname": "Q4 Homepage", "amount": "1500.50"}},
        {"id": "d2", "properties": {"dealname": "Podcast Bundle", "dealstage": "closedwon"}},
    ],
    [{"id": "d3", "properties": {"dealname": "Retargeting", "dealstage": "contractsent"}}],
]
CONTACTS = [
    [
        {"id": "c1", "properties": {"firstname": "Ada", "lastname": "L", "email": "ada@acme.io"}},
        {"id": "c2", "properties": {"firstname": "Grace", "email": "grace@acme.io"}},
    ]
]
COMPANIES = [[{"id": "co1", "properties": {"name": "Acme", "domain": "acme.io"}}]]


def hubspot_api(fake_provider, deals=None, contacts=None, companies=None):
    """Route a fake HubSpot portal. Each object list is a list of pages."""
    pages = {
        "deals": DEALS if deals is None else deals,
        "contacts": CONTACTS if contacts is None else contacts,
        "companies": COMPANIES if companies is None else companies,
    }

    def objects(object_type):
        def handler(request: httpx.Request) -> httpx.Response:
            index = int(request.url.params.get("after", "0"))
            body = {"results": pages[object_type][index]}
            if index + 1 < len(pages[object_type]):
                body["paging"] = {"next": {"after": str(index + 1)}}
            return httpx.Response(200, json=body)

        return handler

    fake_provider.on("POST", "/oauth/v1/token", {"access_token": "hs_access"})
    for object_type in pages:
        fake_provider.on("GET", f"/crm/v3/objects/{object_type}", handler=objects(object_type))
    return fake_provider


@pytest.fixture
def hubspot_integration(db_session):
    return create_integration(
        db_session,
        "hubspot",
        credentials={"client_id": "hs_id", "client_secret": "hs_secret", "refresh_token": "hs_rt"},
    )


@pytest.fixture
def orchestrator(db_session, fake_provider):
    return SyncOrchestrator(db_session, transport=fake_provider.transport)


class TestHubSpotSync:
    def test_full_sync_follows_paging(
        self, db_session, hubspot_integration, fake_provider, orchestrator
    ):
        hubspot_api(fake_provider)

        result = orchestrator.run(hubspot_integration)

        assert result.success is True
        assert result.status == "completed"
        assert result.details["opportunities"]["synced"] == 3
        assert result.details["contacts"]["synced"] == 2
        assert result.details["advertisers"]["synced"] == 1
        assert len(fake_provider.calls("GET", "/crm/v3/objects/deals")) == 2
        assert {o.name for o in db_session.query(Opportunity).all()} == {
            "Q4 Homepage",
            "Podcast Bundle",
            "Retargeting",
        }
        assert db_session.query(Contact).filter(Contact.source == "hubspot").count() == 2
        assert "Acme" in {a.name for a in db_session.query(Advertiser).all()}

    def test_requests_carry_token_and_properties(
        self, db_session, hubspot_integration, fake_provider, orchestrator
    ):
        hubspot_api(fake_provider)
        orchestrator.run(hubspot_integration, "opportunities")

        (token_request,) = fake_provider.calls("POST", "/oauth/v1/token")
        assert b"refresh_token=hs_rt" in token_request.content
        first_page = fake_provider.calls("GET", "/crm/v3/objects/deals")[0]
        assert first_page.headers["Authorization"] == "Bearer hs_access"
        assert "dealname" in first_page.url.params["properties"]
        assert first_page.url.params["limit"] == "100"

    def test_amount_and_stage_translation(
        self, db_session, hubspot_integration, fake_provider, orchestrator
    ):
        hubspot_api(fake_provider)
        orchestrator.run(hubspot_integration, "opportunities")

        homepage = db_session.query(Opportunity).filter(Opportunity.name == "Q4 Homepage").one()
        assert homepage.amount_cents == 150050
        bundle = db_session.query(Opportunity).filter(Opportunity.name == "Podcast Bundle").one()
        assert bundle.stage == "closed_won"

    def test_record_without_name_is_isolated(
        self, db_session, hubspot_integration, fake_provider, orchestrator
    ):
        hubspot_api(
            fake_provider,
            deals=[[{"id": "d9", "properties": {"amount": "10"}}, DEALS[0][0]]],
        )

        result = orchestrator.run(hubspot_integration, "opportunities")

        assert result.status == "completed_with_errors"
        assert result.synced == 1
        assert len(result.details["opportunities"]["errors"]) == 1

    def test_rejected_object_fetch_fails_only_that_entity(
        self, db_session, hubspot_integration, fake_provider, orchestrator
    ):
        hubspot_api(fake_provider)
        fake_provider.on("GET", "/crm/v3/objects/deals", {"message": "scope"}, status=403)

        result = orchestrator.run(hubspot_integration)

        assert result.status == "completed_with_errors"
        assert result.details["opportunities"]["synced"] == 0
        assert len(result.details["opportunities"]["errors"]) == 1
        assert result.details["contacts"]["synced"] == 2
