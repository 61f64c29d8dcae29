"""HubSpot adapter: deals, contacts and companies through the CRM v3 objects API."""

import logging
from typing import Any

from app.core.config import settings
from app.models.integration import IntegrationProviderType, IntegrationType
from app.models.opportunity import PipelineStage
from app.services.integrations.base import (
    EntityResult,
    IntegrationAdapter,
    SyncContext,
    parse_date,
    parse_datetime,
)
from app.services.integrations.credentials import ProviderCredentials
from app.services.integrations.http import ProviderHttpClient
from app.services.integrations.reconciliation import (
    CanonicalAdvertiser,
    CanonicalContact,
    CanonicalOpportunity,
    StageMapping,
    require,
    to_cents,
)

logger = logging.getLogger(__name__)

PAGE_SIZE = 100

HUBSPOT_STAGES = StageMapping(
    {
        "appointmentscheduled": PipelineStage.NEEDS_ANALYSIS,
        "qualifiedtobuy": PipelineStage.NEEDS_ANALYSIS,
        "presentationscheduled": PipelineStage.VALUE_PROPOSITION,
        "decisionmakerboughtin": PipelineStage.PROPOSAL,
        "contractsent": PipelineStage.NEGOTIATION,
        "closedwon": PipelineStage.CLOSED_WON,
        "closedlost": PipelineStage.CLOSED_LOST,
    }
)

DEAL_PROPERTIES = [
    "dealname",
    "amount",
    "dealstage",
    "closedate",
    "description",
    "hs_lastmodifieddate",
    "deal_currency_code",
]
CONTACT_PROPERTIES = ["firstname", "lastname", "email", "phone", "jobtitle", "company", "website"]
COMPANY_PROPERTIES = ["name", "domain", "website"]


def _properties(raw: dict[str, Any]) -> dict[str, Any]:
    props = raw.get("properties")
    if not isinstance(props, dict):
        raise ValueError("record has no properties")
    return {**props, "Id": raw.get("id")}


def translate_deal(raw: dict[str, Any]) -> CanonicalOpportunity:
    props = _properties(raw)
    return CanonicalOpportunity(
        name=require(props, "dealname", "Deal"),
        external_id=raw.get("id"),
        description=props.get("description") or "",
        amount_cents=to_cents(props.get("amount")),
        currency=props.get("deal_currency_code") or "USD",
        stage=HUBSPOT_STAGES.translate(props.get("dealstage")),
        close_date=parse_date(props.get("closedate")),
        last_activity_at=parse_datetime(props.get("hs_lastmodifieddate")),
    )


def translate_contact(raw: dict[str, Any]) -> CanonicalContact:
    props = _properties(raw)
    return CanonicalContact(
        first_name=props.get("firstname") or "",
        last_name=props.get("lastname") or "",
        email=props.get("email"),
        external_id=raw.get("id"),
        phone=props.get("phone"),
        job_title=props.get("jobtitle"),
        company_name=props.get("company"),
        website=props.get("website"),
    )


def translate_company(raw: dict[str, Any]) -> CanonicalAdvertiser:
    props = _properties(raw)
    return CanonicalAdvertiser(
        name=require(props, "name", "Company"),
        external_id=raw.get("id"),
        website=props.get("website") or props.get("domain"),
    )


class HubSpotAdapter(IntegrationAdapter):
    provider = IntegrationProviderType.HUBSPOT.value
    integration_type = IntegrationType.CRM
    description_markers = ("HubSpot",)

    def list_objects(
        self, credentials: ProviderCredentials, object_type: str, properties: list[str]
    ) -> list[dict[str, Any]]:
        """Read every object of a type, following ``paging.next.after`` cursors."""
        results: list[dict[str, Any]] = []
        params: dict[str, Any] = {"limit": PAGE_SIZE, "properties": ",".join(properties)}
        with ProviderHttpClient(
            self.provider,
            base_url=settings.HUBSPOT_API_BASE,
            headers=credentials.auth_headers(),
            transport=self.transport,
        ) as client:
            while True:
                page = client.get(f"/crm/v3/objects/{object_type}", params=params)
                results.extend(page.get("results") or [])
                after = ((page.get("paging") or {}).get("next") or {}).get("after")
                if not after:
                    break
                params = {**params, "after": after}
        return results

    def sync_opportunities(self, ctx: SyncContext) -> EntityResult:
        deals = self.list_objects(ctx.require_credentials(), "deals", DEAL_PROPERTIES)
        logger.info("Fetched %d deals from HubSpot", len(deals))
        return ctx.reconciler.reconcile_opportunities(deals, translate_deal)

    def sync_contacts(self, ctx: SyncContext) -> EntityResult:
        contacts = self.list_objects(ctx.require_credentials(), "contacts", CONTACT_PROPERTIES)
        logger.info("Fetched %d contacts from HubSpot", len(contacts))
        return ctx.reconciler.reconcile_contacts(contacts, translate_contact)

    def sync_advertisers(self, ctx: SyncContext) -> EntityResult:
        companies = self.list_objects(ctx.require_credentials(), "companies", COMPANY_PROPERTIES)
        logger.info("Fetched %d companies from HubSpot", len(companies))
        return ctx.reconciler.reconcile_advertisers(companies, translate_company)
