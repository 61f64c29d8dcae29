"""Kevel (formerly Adzerk) ad-server adapter.

Supports advertiser and inventory sync, campaign push/toggle with flights
as sub-units, and the asynchronous forecaster. Authentication is a static
API key sent in the ``X-Adzerk-ApiKey`` header.
"""

import logging
from typing import TYPE_CHECKING, Any

from app.core.config import settings
from app.models.integration import IntegrationProviderType, IntegrationType
from app.services.integrations.base import (
    DEFAULT_CAMPAIGN_PRICE,
    EntityResult,
    ExternalJobStatus,
    IntegrationAdapter,
    PlacementUnit,
    SyncContext,
)
from app.services.integrations.credentials import ProviderCredentials
from app.services.integrations.errors import ExternalApiError
from app.services.integrations.http import ProviderHttpClient
from app.services.integrations.reconciliation import (
    CanonicalAdSpace,
    CanonicalAdvertiser,
    require,
)

if TYPE_CHECKING:
    from app.models.campaign import Campaign

logger = logging.getLogger(__name__)

DEFAULT_CPM_CENTS = 250
FLIGHT_PRIORITY_ID = 5


def translate_advertiser(raw: dict[str, Any]) -> CanonicalAdvertiser:
    return CanonicalAdvertiser(
        name=require(raw, "Title", "Advertiser"),
        external_id=str(raw["Id"]) if raw.get("Id") is not None else None,
    )


def inventory_records(sites: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Flatten sites into one record per live (site, ad type) pair."""
    records = []
    for site in sites:
        for ad_type in site.get("AdTypes") or []:
            if ad_type.get("IsDeleted"):
                continue
            records.append({"site": site, "ad_type": ad_type})
    return records


def ad_type_size(ad_type: dict[str, Any]) -> str | None:
    width, height = ad_type.get("Width"), ad_type.get("Height")
    if width is None or height is None:
        return None
    return f"{width}x{height}"


def translate_inventory(raw: dict[str, Any]) -> CanonicalAdSpace:
    site, ad_type = raw["site"], raw["ad_type"]
    site_title = require(site, "Title", "Site")
    ad_type_name = require(ad_type, "Name", "Ad type")
    return CanonicalAdSpace(
        name=f"{site_title} - {ad_type_name}",
        size=ad_type_size(ad_type),
        location=site.get("Url") or site_title,
        base_price_cents=DEFAULT_CPM_CENTS,
    )


def _flight_window(campaign: "Campaign") -> tuple[str, str]:
    return (
        f"{campaign.start_date.isoformat()}T00:00:00.000Z",
        f"{campaign.end_date.isoformat()}T23:59:59.999Z",
    )


class KevelAdapter(IntegrationAdapter):
    provider = IntegrationProviderType.KEVEL.value
    integration_type = IntegrationType.AD_SERVER
    description_markers = ("Kevel", "Adzerk")
    location_markers = ("kevel.co", "adzerk")
    supports_campaign_push = True
    supports_forecasting = True

    def _client(self, credentials: ProviderCredentials) -> ProviderHttpClient:
        return ProviderHttpClient(
            self.provider,
            base_url=settings.KEVEL_API_BASE,
            headers={
                "X-Adzerk-ApiKey": credentials.api_key or "",
                "Content-Type": "application/json",
            },
            transport=self.transport,
        )

    def _items(self, credentials: ProviderCredentials, path: str) -> list[dict[str, Any]]:
        with self._client(credentials) as client:
            return list(client.get(path).get("items") or [])

    # -- sync --------------------------------------------------------------

    def sync_advertisers(self, ctx: SyncContext) -> EntityResult:
        advertisers = [
            item
            for item in self._items(ctx.require_credentials(), "/advertiser")
            if not item.get("IsDeleted")
        ]
        logger.info("Fetched %d advertisers from Kevel", len(advertisers))
        return ctx.reconciler.reconcile_advertisers(advertisers, translate_advertiser)

    def sync_inventory(self, ctx: SyncContext) -> EntityResult:
        sites = self._items(ctx.require_credentials(), "/site")
        logger.info("Fetched %d sites from Kevel", len(sites))
        return ctx.reconciler.reconcile_ad_spaces(inventory_records(sites), translate_inventory)

    # -- campaign push -----------------------------------------------------

    def list_external_advertisers(self, credentials: ProviderCredentials) -> list[dict[str, Any]]:
        return self._items(credentials, "/advertiser")

    def create_external_advertiser(self, credentials: ProviderCredentials, name: str) -> str:
        with self._client(credentials) as client:
            created = client.post("/advertiser", json={"Title": name, "IsActive": True})
        logger.info("Created Kevel advertiser %s", created.get("Id"))
        return str(created["Id"])

    def upsert_external_campaign(
        self,
        credentials: ProviderCredentials,
        campaign: "Campaign",
        advertiser_id: str,
        external_id: str | None,
    ) -> str:
        start, end = _flight_window(campaign)
        budget = campaign.budget_cents
        payload = {
            "Name": campaign.name,
            "AdvertiserId": int(advertiser_id),
            "StartDate": start,
            "EndDate": end,
            "IsActive": campaign.status == "active",
            "Price": budget / 100 if budget else DEFAULT_CAMPAIGN_PRICE,
        }
        with self._client(credentials) as client:
            if external_id:
                body = client.put(
                    f"/campaign/{external_id}", json={**payload, "Id": int(external_id)}
                )
                return str(body.get("Id") or external_id)
            body = client.post("/campaign", json=payload)
        if body.get("Id") is None:
            raise ExternalApiError(self.provider, None, "Campaign response carried no Id")
        return str(body["Id"])

    def list_sites(self, credentials: ProviderCredentials) -> list[dict[str, Any]]:
        return self._items(credentials, "/site")

    def list_placement_units(
        self, credentials: ProviderCredentials, site: dict[str, Any]
    ) -> list[PlacementUnit]:
        if not isinstance(site, dict) or site.get("Id") is None:
            raise ExternalApiError(self.provider, None, "Site carried no Id")
        site_id = str(site["Id"])
        units = []
        for zone in self._items(credentials, f"/site/{site_id}/zone"):
            if not isinstance(zone, dict) or zone.get("Id") is None:
                logger.warning("Skipping zone without Id on site %s", site_id)
                continue
            units.append(
                PlacementUnit(
                    id=str(zone["Id"]), name=str(zone.get("Name") or zone["Id"]), site_id=site_id
                )
            )
        return units

    def create_sub_unit(
        self,
        credentials: ProviderCredentials,
        campaign: "Campaign",
        external_campaign_id: str,
        unit: PlacementUnit,
        price: float,
    ) -> str:
        start, end = _flight_window(campaign)
        payload = {
            "Name": f"{campaign.name} - {unit.name}",
            "CampaignId": int(external_campaign_id),
            "PriorityId": FLIGHT_PRIORITY_ID,
            "ZoneId": int(unit.id),
            "StartDate": start,
            "EndDate": end,
            # Flights are always created paused; activation is a separate toggle
            "IsActive": False,
            "IsUnlimited": True,
            "Price": price,
        }
        with self._client(credentials) as client:
            flight = client.post("/flight", json=payload)
        if flight.get("Id") is None:
            raise ExternalApiError(self.provider, None, "Flight response carried no Id")
        return str(flight["Id"])

    def set_campaign_active(
        self, credentials: ProviderCredentials, external_campaign_id: str, active: bool
    ) -> None:
        with self._client(credentials) as client:
            client.put(f"/campaign/{external_campaign_id}", json={"IsActive": active})

    def list_sub_units(
        self, credentials: ProviderCredentials, external_campaign_id: str
    ) -> list[str]:
        return [
            str(flight["Id"])
            for flight in self._items(credentials, f"/campaign/{external_campaign_id}/flight")
        ]

    def set_sub_unit_active(
        self, credentials: ProviderCredentials, sub_unit_id: str, active: bool
    ) -> None:
        with self._client(credentials) as client:
            client.put(f"/flight/{sub_unit_id}", json={"IsActive": active})

    # -- forecasting -------------------------------------------------------

    def start_forecast(
        self, credentials: ProviderCredentials, payload: dict[str, Any]
    ) -> ExternalJobStatus:
        with self._client(credentials) as client:
            body = client.post("/forecaster/", json=payload)
        return self._job_status(body)

    def get_forecast(self, credentials: ProviderCredentials, job_id: str) -> ExternalJobStatus:
        with self._client(credentials) as client:
            body = client.get(f"/forecaster/{job_id}")
        return self._job_status(body, job_id)

    def _job_status(self, body: dict[str, Any], job_id: str | None = None) -> ExternalJobStatus:
        result = body.get("result")
        if result is not None and not isinstance(result, dict):
            result = {"data": result}
        return ExternalJobStatus(
            job_id=str(body.get("id") or job_id or ""),
            status=str(body.get("status") or ""),
            progress=body.get("progress"),
            result=result,
        )
