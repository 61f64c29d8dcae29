"""Salesforce adapter: opportunities, contacts and accounts over SOQL."""

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
from app.services.integrations.errors import MissingCredentialsError
from app.services.integrations.http import ProviderHttpClient
from app.services.integrations.reconciliation import (
    CanonicalAdvertiser,
    CanonicalContact,
    CanonicalOpportunity,
    StageMapping,
    nested,
    require,
    to_cents,
)

logger = logging.getLogger(__name__)

SALESFORCE_STAGES = StageMapping(
    {
        "Prospecting": PipelineStage.NEEDS_ANALYSIS,
        "Qualification": PipelineStage.NEEDS_ANALYSIS,
        "Needs Analysis": PipelineStage.NEEDS_ANALYSIS,
        "Value Proposition": PipelineStage.VALUE_PROPOSITION,
        "Id. Decision Makers": PipelineStage.VALUE_PROPOSITION,
        "Perception Analysis": PipelineStage.PROPOSAL,
        "Proposal/Price Quote": PipelineStage.PROPOSAL,
        "Negotiation/Review": PipelineStage.NEGOTIATION,
        "Closed Won": PipelineStage.CLOSED_WON,
        "Closed Lost": PipelineStage.CLOSED_LOST,
    }
)

OPPORTUNITY_SOQL = (
    "SELECT Id, Name, StageName, Amount, CloseDate, Probability, Description, "
    "AccountId, Account.Name, Account.Website, CreatedDate, LastModifiedDate "
    "FROM Opportunity WHERE LastModifiedDate >= LAST_N_DAYS:30 "
    "ORDER BY LastModifiedDate DESC"
)
CONTACT_SOQL = (
    "SELECT Id, FirstName, LastName, Email, Phone, Title, AccountId, Account.Name, "
    "Account.Website FROM Contact WHERE LastModifiedDate >= LAST_N_DAYS:30 "
    "ORDER BY LastModifiedDate DESC"
)
ACCOUNT_SOQL = (
    "SELECT Id, Name, Website FROM Account WHERE LastModifiedDate >= LAST_N_DAYS:30 "
    "ORDER BY LastModifiedDate DESC"
)


def translate_opportunity(raw: dict[str, Any]) -> CanonicalOpportunity:
    name = require(raw, "Name", "Opportunity")
    account = nested(raw, "Account", "Opportunity")
    probability = raw.get("Probability")
    return CanonicalOpportunity(
        name=name,
        external_id=raw.get("Id"),
        description=raw.get("Description") or "",
        amount_cents=to_cents(raw.get("Amount")),
        stage=SALESFORCE_STAGES.translate(raw.get("StageName")),
        probability=int(probability) if probability is not None else 50,
        close_date=parse_date(raw.get("CloseDate")),
        last_activity_at=parse_datetime(raw.get("LastModifiedDate")),
        account=(
            CanonicalAdvertiser(
                name=account["Name"],
                external_id=raw.get("AccountId"),
                website=account.get("Website"),
            )
            if account.get("Name")
            else None
        ),
    )


def translate_contact(raw: dict[str, Any]) -> CanonicalContact:
    account = nested(raw, "Account", "Contact")
    return CanonicalContact(
        first_name=raw.get("FirstName") or "",
        last_name=raw.get("LastName") or "",
        email=raw.get("Email"),
        external_id=raw.get("Id"),
        phone=raw.get("Phone"),
        job_title=raw.get("Title"),
        company_name=account.get("Name"),
        website=account.get("Website"),
    )


def translate_account(raw: dict[str, Any]) -> CanonicalAdvertiser:
    return CanonicalAdvertiser(
        name=require(raw, "Name", "Account"),
        external_id=raw.get("Id"),
        website=raw.get("Website"),
    )


class SalesforceAdapter(IntegrationAdapter):
    provider = IntegrationProviderType.SALESFORCE.value
    integration_type = IntegrationType.CRM
    description_markers = ("Salesforce",)

    def _client(self, credentials: ProviderCredentials) -> ProviderHttpClient:
        if not credentials.instance_url:
            raise MissingCredentialsError(self.provider, ["instance_url"])
        return ProviderHttpClient(
            self.provider,
            base_url=credentials.instance_url,
            headers={**credentials.auth_headers(), "Content-Type": "application/json"},
            transport=self.transport,
        )

    def query(self, credentials: ProviderCredentials, soql: str) -> list[dict[str, Any]]:
        """Run a SOQL query, following ``nextRecordsUrl`` until ``done``."""
        records: list[dict[str, Any]] = []
        with self._client(credentials) as client:
            page = client.get(
                f"/services/data/{settings.SALESFORCE_API_VERSION}/query/", params={"q": soql}
            )
            records.extend(page.get("records") or [])
            while not page.get("done", True) and page.get("nextRecordsUrl"):
                page = client.get(page["nextRecordsUrl"])
                records.extend(page.get("records") or [])
        return records

    def sync_opportunities(self, ctx: SyncContext) -> EntityResult:
        records = self.query(ctx.require_credentials(), OPPORTUNITY_SOQL)
        logger.info("Fetched %d opportunities from Salesforce", len(records))
        return ctx.reconciler.reconcile_opportunities(records, translate_opportunity)

    def sync_contacts(self, ctx: SyncContext) -> EntityResult:
        records = self.query(ctx.require_credentials(), CONTACT_SOQL)
        logger.info("Fetched %d contacts from Salesforce", len(records))
        return ctx.reconciler.reconcile_contacts(records, translate_contact)

    def sync_advertisers(self, ctx: SyncContext) -> EntityResult:
        records = self.query(ctx.require_credentials(), ACCOUNT_SOQL)
        logger.info("Fetched %d accounts from Salesforce", len(records))
        return ctx.reconciler.reconcile_advertisers(records, translate_account)
