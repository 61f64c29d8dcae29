"""Cascade deletion of an integration and everything derived from it.

Steps run strictly in dependency order and each is attempted even when an
earlier one failed; this is a best-effort cascade, not a transaction:

1. campaign mappings
2. sync history
3. campaigns derived from the integration (junction rows first)
4. ad spaces derived from the integration (junction rows first)
5. the integration row itself

Derived rows are identified by their ``integration_id`` provenance column.
With ``CASCADE_LEGACY_PROVENANCE_HEURISTIC`` enabled, rows that predate
provenance tracking are also matched on provider text markers in their
description (campaigns) or location (ad spaces). Imported opportunities,
contacts and advertisers are kept and only lose their provenance.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.audit_log import AuditAction, AuditResource
from app.models.integration import Integration
from app.models.shared import coerce_uuid
from app.repositories.ad_space_repository import AdSpaceRepository
from app.repositories.advertiser_repository import AdvertiserRepository
from app.repositories.campaign_ad_space_repository import CampaignAdSpaceRepository
from app.repositories.campaign_repository import CampaignRepository
from app.repositories.contact_repository import ContactRepository
from app.repositories.integration_mapping_repository import IntegrationMappingRepository
from app.repositories.integration_repository import IntegrationRepository
from app.repositories.integration_sync_history_repository import (
    IntegrationSyncHistoryRepository,
)
from app.repositories.opportunity_repository import OpportunityRepository
from app.repositories.sync_lease_repository import SyncLeaseRepository
from app.services.audit_service import AuditService
from app.services.integrations.base import IntegrationAdapter
from app.services.integrations.errors import UnsupportedProviderError
from app.services.integrations.registry import AdapterRegistry, adapter_registry

logger = logging.getLogger(__name__)


@dataclass
class DeletionResult:
    success: bool
    deleted_counts: dict[str, int]
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "deleted_counts": self.deleted_counts,
            "errors": self.errors,
        }


class IntegrationDeletionService:
    def __init__(
        self,
        db: Session,
        registry: AdapterRegistry | None = None,
        legacy_heuristic: bool | None = None,
    ):
        self.db = db
        self.registry = registry or adapter_registry
        self.legacy_heuristic = (
            settings.CASCADE_LEGACY_PROVENANCE_HEURISTIC
            if legacy_heuristic is None
            else legacy_heuristic
        )
        self.integration_repo = IntegrationRepository(db)
        self.mapping_repo = IntegrationMappingRepository(db)
        self.history_repo = IntegrationSyncHistoryRepository(db)
        self.campaign_repo = CampaignRepository(db)
        self.ad_space_repo = AdSpaceRepository(db)
        self.junction_repo = CampaignAdSpaceRepository(db)
        self.lease_repo = SyncLeaseRepository(db)
        self.opportunity_repo = OpportunityRepository(db)
        self.contact_repo = ContactRepository(db)
        self.advertiser_repo = AdvertiserRepository(db)
        self.audit = AuditService(db)

    def delete(self, integration: Integration) -> DeletionResult:
        integration_id = coerce_uuid(integration.id)
        company_id = coerce_uuid(integration.company_id)
        name = str(integration.name)
        adapter_cls = self._adapter_class(str(integration.provider_type))
        errors: list[str] = []
        logger.info("Deleting integration %s (%s)", integration_id, integration.provider_type)

        counts = {
            "mappings": self._step(
                "mappings", lambda: self.mapping_repo.delete_by_integration(integration_id), errors
            ),
            "history": self._step(
                "history", lambda: self.history_repo.delete_by_integration(integration_id), errors
            ),
            "campaigns": self._step(
                "campaigns",
                lambda: self._delete_campaigns(integration_id, company_id, adapter_cls),
                errors,
            ),
            "ad_spaces": self._step(
                "ad_spaces",
                lambda: self._delete_ad_spaces(integration_id, company_id, adapter_cls),
                errors,
            ),
        }
        self._step("provenance", lambda: self._detach_records(integration_id), errors)
        self._step("leases", lambda: self.lease_repo.delete_by_integration(integration_id), errors)
        counts["integration"] = self._step(
            "integration", lambda: self._delete_integration(integration), errors
        )

        success = counts["integration"] == 1
        if success:
            self.audit.log_event(
                resource_type=AuditResource.INTEGRATION,
                resource_id=integration_id,
                company_id=company_id,
                action=AuditAction.DELETED,
                changes={"name": name},
                metadata={"deleted_counts": counts},
            )
        logger.info("Deletion of integration %s finished: %s", integration_id, counts)
        return DeletionResult(success=success, deleted_counts=counts, errors=errors)

    def _step(self, name: str, action: Callable[[], int], errors: list[str]) -> int:
        try:
            return action()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Cascade step %s failed", name)
            errors.append(f"{name}: {exc}")
            return 0

    def _adapter_class(self, provider: str) -> type[IntegrationAdapter] | None:
        try:
            return type(self.registry.resolve(provider))
        except UnsupportedProviderError:
            return None

    def _delete_campaigns(
        self,
        integration_id: UUID,
        company_id: UUID,
        adapter_cls: type[IntegrationAdapter] | None,
    ) -> int:
        ids = self.campaign_repo.get_ids_by_integration(integration_id)
        if self.legacy_heuristic and adapter_cls is not None:
            ids += self.campaign_repo.get_ids_by_description_markers(
                company_id, list(adapter_cls.description_markers)
            )
        self.junction_repo.delete_by_campaigns(ids)
        return self.campaign_repo.delete_many(ids)

    def _delete_ad_spaces(
        self,
        integration_id: UUID,
        company_id: UUID,
        adapter_cls: type[IntegrationAdapter] | None,
    ) -> int:
        ids = self.ad_space_repo.get_ids_by_integration(integration_id)
        if self.legacy_heuristic and adapter_cls is not None:
            ids += self.ad_space_repo.get_ids_by_location_markers(
                company_id, list(adapter_cls.location_markers)
            )
        self.junction_repo.delete_by_ad_spaces(ids)
        return self.ad_space_repo.delete_many(ids)

    def _detach_records(self, integration_id: UUID) -> int:
        return (
            self.opportunity_repo.detach_integration(integration_id)
            + self.contact_repo.detach_integration(integration_id)
            + self.advertiser_repo.detach_integration(integration_id)
        )

    def _delete_integration(self, integration: Integration) -> int:
        self.integration_repo.delete(integration)
        return 1
