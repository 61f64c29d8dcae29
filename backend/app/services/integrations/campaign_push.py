"""Projects local campaigns onto an ad server's campaign / flight hierarchy."""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.audit_log import AuditAction
from app.models.campaign import Campaign, CampaignStatus
from app.models.integration import Integration
from app.models.integration_mapping import IntegrationMapping, MappableType
from app.models.shared import coerce_uuid, utc_now
from app.repositories.campaign_repository import CampaignRepository
from app.repositories.integration_mapping_repository import IntegrationMappingRepository
from app.repositories.integration_repository import IntegrationRepository
from app.schemas.integration_mapping import IntegrationMappingCreate, IntegrationMappingUpdate
from app.services.audit_service import AuditService
from app.services.integrations.base import DEFAULT_CAMPAIGN_PRICE, IntegrationAdapter
from app.services.integrations.credentials import ProviderCredentials
from app.services.integrations.errors import (
    ExternalApiError,
    MissingCredentialsError,
    NotPushedError,
    UnsupportedCapabilityError,
)
from app.services.integrations.registry import AdapterRegistry, adapter_registry

logger = logging.getLogger(__name__)

DEFAULT_ADVERTISER_TITLE = "Default Advertiser"

# Malformed provider payloads surface as these while fanning out
FAN_OUT_ERRORS = (ExternalApiError, KeyError, TypeError, ValueError)


@dataclass
class PushResult:
    success: bool
    external_campaign_id: str
    sub_units_created: int
    created: bool
    errors: list[str] = field(default_factory=list)
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "external_campaign_id": self.external_campaign_id,
            "sub_units_created": self.sub_units_created,
            "created": self.created,
            "errors": self.errors,
            "message": self.message,
        }


@dataclass
class ToggleResult:
    success: bool
    status: str
    sub_unit_errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "status": self.status,
            "sub_unit_errors": self.sub_unit_errors,
        }


def describe(exc: Exception) -> str:
    return exc.message if isinstance(exc, ExternalApiError) else f"{type(exc).__name__}: {exc}"


def max_sub_units(integration: Integration) -> int:
    configuration: dict[str, Any] = integration.configuration or {}  # type: ignore[assignment]
    value = configuration.get("max_sub_units_per_push")
    if value is None:
        return settings.CAMPAIGN_PUSH_MAX_SUB_UNITS
    return max(0, int(value))


def sub_unit_price(campaign: Campaign, limit: int) -> float:
    """Split the campaign budget evenly over the fan-out limit, in dollars."""
    budget = campaign.budget_cents / 100 if campaign.budget_cents else DEFAULT_CAMPAIGN_PRICE
    return round(budget / max(limit, 1), 2)


class CampaignPushCoordinator:
    """Pushes campaigns to an integration and toggles them once pushed.

    A push runs four steps: resolve the external advertiser, create or
    update the external campaign, fan out paused flights over the
    inventory, and record the local-to-external mapping. No transaction
    spans these steps; flight failures are collected and reported while
    the push carries on.
    """

    def __init__(
        self,
        db: Session,
        registry: AdapterRegistry | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.db = db
        self.registry = registry or adapter_registry
        self.transport = transport
        self.campaign_repo = CampaignRepository(db)
        self.mapping_repo = IntegrationMappingRepository(db)
        self.integration_repo = IntegrationRepository(db)
        self.audit = AuditService(db)

    def push(self, campaign: Campaign, integration: Integration) -> PushResult:
        adapter = self._adapter(integration)
        credentials = self._credentials(adapter, integration)
        mapping = self._mapping(campaign, integration)

        # 1. external advertiser
        advertiser_id = self._resolve_advertiser(adapter, credentials, mapping)

        # 2. external campaign; an existing mapping turns the push into an update
        previous_external_id = str(mapping.external_id) if mapping else None
        external_id = adapter.upsert_external_campaign(
            credentials, campaign, advertiser_id, previous_external_id
        )
        created = previous_external_id is None

        # 3. sub-units
        known: dict[str, str] = {}
        if mapping is not None and previous_external_id == external_id:
            known = dict((mapping.external_data or {}).get("sub_units") or {})
        sub_units, new_count, errors = self._fan_out(
            adapter, credentials, campaign, integration, external_id, known
        )

        # 4. mapping
        now = utc_now()
        if mapping is None:
            self.mapping_repo.create(
                IntegrationMappingCreate(
                    integration_id=coerce_uuid(integration.id),
                    mappable_type=MappableType.CAMPAIGN.value,
                    mappable_id=coerce_uuid(campaign.id),
                    external_id=external_id,
                    external_parent_id=advertiser_id,
                    external_data={"sub_units": sub_units},
                    sub_units_created=len(sub_units),
                    pushed_at=now,
                )
            )
        else:
            self.mapping_repo.update(
                mapping,
                IntegrationMappingUpdate(
                    external_id=external_id,
                    external_parent_id=advertiser_id,
                    external_data={**(mapping.external_data or {}), "sub_units": sub_units},
                    sub_units_created=len(sub_units),
                    pushed_at=now,
                    last_synced_at=now,
                ),
            )
        self.integration_repo.set_configuration_entry(
            integration,
            "campaign_map",
            str(campaign.id),
            {
                "external_id": external_id,
                "pushed_at": now.isoformat(),
                "status": "synced",
                "sub_units_created": len(sub_units),
            },
        )

        self.audit.log_for(
            campaign,
            AuditAction.PUSHED,
            changes={"external_id": external_id, "created": created},
            metadata={
                "integration_id": str(integration.id),
                "sub_units_created": new_count,
                "sub_unit_errors": len(errors),
            },
        )

        verb = "created in" if created else "updated in"
        message = (
            f'Campaign "{campaign.name}" {verb} {integration.provider_type} '
            f"with {new_count} new sub-units"
        )
        if errors:
            message += f" ({len(errors)} sub-unit errors)"
        logger.info("%s", message)
        return PushResult(
            success=True,
            external_campaign_id=external_id,
            sub_units_created=new_count,
            created=created,
            errors=errors,
            message=message,
        )

    def toggle(self, campaign: Campaign, integration: Integration, activate: bool) -> ToggleResult:
        adapter = self._adapter(integration)
        mapping = self._mapping(campaign, integration)
        if mapping is None:
            raise NotPushedError(campaign.id)
        credentials = self._credentials(adapter, integration)
        external_id = str(mapping.external_id)

        # External first: a failure here leaves the local campaign untouched
        adapter.set_campaign_active(credentials, external_id, activate)

        errors: list[str] = []
        try:
            sub_unit_ids = adapter.list_sub_units(credentials, external_id)
        except ExternalApiError as exc:
            logger.warning("Listing sub-units of campaign %s failed: %s", external_id, exc)
            errors.append(f"list sub-units: {exc.message}")
            sub_unit_ids = list(((mapping.external_data or {}).get("sub_units") or {}).values())

        for sub_unit_id in sub_unit_ids:
            try:
                adapter.set_sub_unit_active(credentials, sub_unit_id, activate)
            except ExternalApiError as exc:
                logger.warning("Toggling sub-unit %s failed: %s", sub_unit_id, exc)
                errors.append(f"sub-unit {sub_unit_id}: {exc.message}")

        old_status = str(campaign.status)
        new_status = CampaignStatus.ACTIVE.value if activate else CampaignStatus.PAUSED.value
        self.campaign_repo.set_status(campaign, new_status)
        self.mapping_repo.update(mapping, IntegrationMappingUpdate(last_synced_at=utc_now()))

        self.audit.log_status_change(campaign, old_status, new_status)
        logger.info(
            "Campaign %s %s on integration %s (%d sub-unit errors)",
            campaign.id,
            new_status,
            integration.id,
            len(errors),
        )
        return ToggleResult(success=True, status=new_status, sub_unit_errors=errors)

    def _adapter(self, integration: Integration) -> IntegrationAdapter:
        provider = str(integration.provider_type)
        adapter = self.registry.resolve(provider, transport=self.transport)
        if not adapter.supports_campaign_push:
            raise UnsupportedCapabilityError(provider, "campaign push")
        return adapter

    def _credentials(
        self, adapter: IntegrationAdapter, integration: Integration
    ) -> ProviderCredentials:
        credentials = adapter.authenticate(integration)
        if credentials is None:
            raise MissingCredentialsError(str(integration.provider_type), ["api_key"])
        return credentials

    def _mapping(self, campaign: Campaign, integration: Integration) -> IntegrationMapping | None:
        return self.mapping_repo.get_by_mappable(
            coerce_uuid(integration.id), MappableType.CAMPAIGN.value, coerce_uuid(campaign.id)
        )

    def _resolve_advertiser(
        self,
        adapter: IntegrationAdapter,
        credentials: ProviderCredentials,
        mapping: IntegrationMapping | None,
    ) -> str:
        if mapping is not None and mapping.external_parent_id:
            return str(mapping.external_parent_id)
        advertisers = adapter.list_external_advertisers(credentials)
        if advertisers:
            return str(advertisers[0]["Id"])
        logger.info("No external advertisers found, creating %r", DEFAULT_ADVERTISER_TITLE)
        return adapter.create_external_advertiser(credentials, DEFAULT_ADVERTISER_TITLE)

    def _fan_out(
        self,
        adapter: IntegrationAdapter,
        credentials: ProviderCredentials,
        campaign: Campaign,
        integration: Integration,
        external_id: str,
        known: dict[str, str],
    ) -> tuple[dict[str, str], int, list[str]]:
        """Create paused sub-units for placement units not covered yet.

        At most ``max_sub_units`` creations are attempted per push; units that
        already carry a sub-unit from an earlier push are skipped.
        Returns (placement unit id -> sub-unit id, new sub-units, errors).
        """
        limit = max_sub_units(integration)
        price = sub_unit_price(campaign, limit)
        sub_units = dict(known)
        errors: list[str] = []
        attempts = 0
        created = 0
        if limit == 0:
            return sub_units, created, errors

        try:
            sites = adapter.list_sites(credentials)
        except FAN_OUT_ERRORS as exc:
            logger.warning("Listing sites failed: %s", exc)
            return sub_units, created, [f"list sites: {describe(exc)}"]

        for index, site in enumerate(sites):
            if attempts >= limit:
                break
            site_ref = (site.get("Id") if isinstance(site, dict) else None) or f"#{index}"
            try:
                units = adapter.list_placement_units(credentials, site)
            except FAN_OUT_ERRORS as exc:
                logger.warning("Listing zones of site %s failed: %s", site_ref, exc)
                errors.append(f"site {site_ref}: {describe(exc)}")
                continue
            for unit in units:
                if attempts >= limit:
                    break
                if unit.id in sub_units:
                    continue
                attempts += 1
                try:
                    sub_units[unit.id] = adapter.create_sub_unit(
                        credentials, campaign, external_id, unit, price
                    )
                except FAN_OUT_ERRORS as exc:
                    logger.warning("Creating sub-unit for zone %s failed: %s", unit.id, exc)
                    errors.append(f"zone {unit.id}: {describe(exc)}")
                    continue
                created += 1
        return sub_units, created, errors
