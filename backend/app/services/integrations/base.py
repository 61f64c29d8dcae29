"""Integration adapter base class.

Defines the IntegrationAdapter contract every provider implements. The
sync capabilities default to a zero-result stub, so a provider that has
no notion of (say) contacts still answers, and the orchestrator never has
to special-case "not implemented". Campaign push and forecasting are
optional capabilities; the defaults raise ``UnsupportedCapabilityError``.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, ClassVar

import httpx

from app.models.integration import Integration, IntegrationType
from app.services.integrations.credentials import CredentialResolver, ProviderCredentials
from app.services.integrations.errors import (
    MissingCredentialsError,
    UnsupportedCapabilityError,
)

if TYPE_CHECKING:
    from app.models.campaign import Campaign
    from app.services.integrations.reconciliation import ReconciliationEngine

logger = logging.getLogger(__name__)

# Budget used when a campaign has none, in dollars
DEFAULT_CAMPAIGN_PRICE = 1000


@dataclass
class EntityResult:
    """Outcome of syncing one entity class.

    ``count`` is the number of records reconciled successfully and
    ``errors`` holds one message per record (or fetch) that failed.
    ``warnings`` collects failures of side records, such as an opportunity's
    parent account, which do not count against the record itself.
    """

    count: int = 0
    errors: list[str] = field(default_factory=list)
    fetched: int = 0
    created: int = 0
    updated: int = 0
    deleted: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def to_operations(self) -> dict[str, Any]:
        return {
            "fetched": self.fetched,
            "synced": self.count,
            "created": self.created,
            "updated": self.updated,
            "deleted": self.deleted,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


@dataclass
class SyncContext:
    """Everything an adapter needs during one sync run."""

    integration: Integration
    credentials: ProviderCredentials | None
    reconciler: "ReconciliationEngine"

    def require_credentials(self) -> ProviderCredentials:
        if self.credentials is None:
            raise MissingCredentialsError(str(self.integration.provider_type), ["credentials"])
        return self.credentials


@dataclass
class PlacementUnit:
    """One bookable inventory unit (a Kevel zone) beneath a site."""

    id: str
    name: str
    site_id: str


@dataclass
class ExternalJobStatus:
    job_id: str
    status: str
    progress: float | None = None
    result: dict[str, Any] | None = None


class IntegrationAdapter:
    """Base class for provider adapters.

    Adapters are stateless with respect to integrations: every call receives
    the integration (or a SyncContext) it acts on. ``transport`` is handed
    to every httpx client the adapter opens.
    """

    provider: ClassVar[str]
    integration_type: ClassVar[IntegrationType]
    # Text markers identifying rows created by this provider before
    # provenance was recorded; only used by the legacy cascade heuristic
    description_markers: ClassVar[tuple[str, ...]] = ()
    location_markers: ClassVar[tuple[str, ...]] = ()
    supports_campaign_push: ClassVar[bool] = False
    supports_forecasting: ClassVar[bool] = False

    def __init__(self, transport: httpx.BaseTransport | None = None) -> None:
        self.transport = transport
        self.credential_resolver = CredentialResolver(transport=transport)

    def authenticate(self, integration: Integration) -> ProviderCredentials | None:
        """Resolve credentials for one run. Stub adapters need none."""
        return self.credential_resolver.resolve(integration)

    # -- sync capabilities -------------------------------------------------

    def sync_opportunities(self, ctx: SyncContext) -> EntityResult:
        return EntityResult()

    def sync_contacts(self, ctx: SyncContext) -> EntityResult:
        return EntityResult()

    def sync_advertisers(self, ctx: SyncContext) -> EntityResult:
        return EntityResult()

    def sync_inventory(self, ctx: SyncContext) -> EntityResult:
        return EntityResult()

    # -- campaign push capability -----------------------------------------

    def list_external_advertisers(self, credentials: ProviderCredentials) -> list[dict[str, Any]]:
        raise UnsupportedCapabilityError(self.provider, "campaign push")

    def create_external_advertiser(self, credentials: ProviderCredentials, name: str) -> str:
        raise UnsupportedCapabilityError(self.provider, "campaign push")

    def upsert_external_campaign(
        self,
        credentials: ProviderCredentials,
        campaign: "Campaign",
        advertiser_id: str,
        external_id: str | None,
    ) -> str:
        raise UnsupportedCapabilityError(self.provider, "campaign push")

    def list_sites(self, credentials: ProviderCredentials) -> list[dict[str, Any]]:
        raise UnsupportedCapabilityError(self.provider, "campaign push")

    def list_placement_units(
        self, credentials: ProviderCredentials, site: dict[str, Any]
    ) -> list[PlacementUnit]:
        raise UnsupportedCapabilityError(self.provider, "campaign push")

    def create_sub_unit(
        self,
        credentials: ProviderCredentials,
        campaign: "Campaign",
        external_campaign_id: str,
        unit: PlacementUnit,
        price: float,
    ) -> str:
        raise UnsupportedCapabilityError(self.provider, "campaign push")

    def set_campaign_active(
        self, credentials: ProviderCredentials, external_campaign_id: str, active: bool
    ) -> None:
        raise UnsupportedCapabilityError(self.provider, "campaign toggle")

    def list_sub_units(
        self, credentials: ProviderCredentials, external_campaign_id: str
    ) -> list[str]:
        raise UnsupportedCapabilityError(self.provider, "campaign toggle")

    def set_sub_unit_active(
        self, credentials: ProviderCredentials, sub_unit_id: str, active: bool
    ) -> None:
        raise UnsupportedCapabilityError(self.provider, "campaign toggle")

    # -- async job capability ---------------------------------------------

    def start_forecast(
        self, credentials: ProviderCredentials, payload: dict[str, Any]
    ) -> ExternalJobStatus:
        raise UnsupportedCapabilityError(self.provider, "forecasting")

    def get_forecast(self, credentials: ProviderCredentials, job_id: str) -> ExternalJobStatus:
        raise UnsupportedCapabilityError(self.provider, "forecasting")


def parse_date(value: Any) -> date | None:
    """Parse the date part of an ISO date or datetime string."""
    if not value:
        return None
    return date.fromisoformat(str(value)[:10])


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO 8601 timestamp as sent by provider APIs (``Z`` or ``+0000`` offsets)."""
    if not value:
        return None
    text = re.sub(r"([+-]\d{2})(\d{2})$", r"\1:\2", str(value).replace("Z", "+00:00"))
    return datetime.fromisoformat(text)
