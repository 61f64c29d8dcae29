"""Sync orchestrator: drives one sync run of one integration.

A run resolves the provider adapter, takes the integration's lease,
authenticates once, then syncs each requested entity class in turn.
Failures inside an entity class are recorded against that class only; a
credential failure fails the run. Whatever happens after the lease is
taken, exactly one history row is written and ``last_sync_at`` is stamped.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.audit_log import AuditAction
from app.models.integration import Integration, IntegrationStatus
from app.models.integration_sync_history import SyncStatus, SyncType
from app.models.shared import coerce_uuid, utc_now
from app.repositories.integration_repository import IntegrationRepository
from app.repositories.integration_sync_history_repository import (
    IntegrationSyncHistoryRepository,
)
from app.repositories.sync_lease_repository import SyncLeaseRepository
from app.schemas.integration_sync_history import IntegrationSyncHistoryCreate
from app.services.audit_service import AuditService
from app.services.integrations.base import EntityResult, IntegrationAdapter, SyncContext
from app.services.integrations.errors import (
    AuthenticationError,
    ExternalApiError,
    IntegrationError,
    MissingCredentialsError,
    SyncInProgressError,
)
from app.services.integrations.reconciliation import ReconciliationEngine
from app.services.integrations.registry import AdapterRegistry, adapter_registry

logger = logging.getLogger(__name__)

ENTITY_METHODS: dict[SyncType, str] = {
    SyncType.OPPORTUNITIES: "sync_opportunities",
    SyncType.CONTACTS: "sync_contacts",
    SyncType.ADVERTISERS: "sync_advertisers",
    SyncType.INVENTORY: "sync_inventory",
}

FULL_SYNC_ENTITIES = [
    SyncType.OPPORTUNITIES,
    SyncType.CONTACTS,
    SyncType.ADVERTISERS,
    SyncType.INVENTORY,
]


@dataclass
class SyncRunResult:
    success: bool
    provider: str
    synced: int
    errors: int
    status: str
    history_id: UUID | None = None
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "provider": self.provider,
            "synced": self.synced,
            "errors": self.errors,
            "status": self.status,
            "history_id": self.history_id,
            "error": self.error,
            "details": self.details,
        }


def run_status(synced: int, errors: int, fatal: bool = False) -> SyncStatus:
    if fatal or (errors and not synced):
        return SyncStatus.FAILED
    if errors:
        return SyncStatus.COMPLETED_WITH_ERRORS
    return SyncStatus.COMPLETED


class SyncOrchestrator:
    def __init__(
        self,
        db: Session,
        registry: AdapterRegistry | None = None,
        transport: httpx.BaseTransport | None = None,
        lease_ttl_seconds: int | None = None,
    ):
        self.db = db
        self.registry = registry or adapter_registry
        self.transport = transport
        self.lease_ttl_seconds = lease_ttl_seconds or settings.SYNC_LEASE_TTL_SECONDS
        self.integration_repo = IntegrationRepository(db)
        self.history_repo = IntegrationSyncHistoryRepository(db)
        self.lease_repo = SyncLeaseRepository(db)
        self.audit = AuditService(db)

    def run(
        self, integration: Integration, sync_type: SyncType | str = SyncType.FULL
    ) -> SyncRunResult:
        """Run one sync of ``integration``.

        Raises:
            UnsupportedProviderError: no adapter is registered for the provider.
            SyncInProgressError: another run holds the integration's lease.
        """
        sync_type = SyncType(sync_type)
        adapter = self.registry.resolve(str(integration.provider_type), transport=self.transport)

        integration_id = coerce_uuid(integration.id)
        token = self.lease_repo.acquire(integration_id, self.lease_ttl_seconds)
        if token is None:
            logger.info("Sync of integration %s skipped: lease held", integration_id)
            raise SyncInProgressError(integration_id)

        try:
            return self._run(adapter, integration, sync_type)
        finally:
            try:
                self.lease_repo.release(integration_id, token)
            except SQLAlchemyError as exc:
                # The lease expires on its own
                self.db.rollback()
                logger.warning("Failed to release lease of integration %s: %s", integration_id, exc)

    def _run(
        self, adapter: IntegrationAdapter, integration: Integration, sync_type: SyncType
    ) -> SyncRunResult:
        provider = str(integration.provider_type)
        entities = FULL_SYNC_ENTITIES if sync_type == SyncType.FULL else [sync_type]
        started_at = utc_now()
        clock = time.monotonic()
        logger.info(
            "Starting %s sync of %s integration %s", sync_type.value, provider, integration.id
        )

        details: dict[str, Any] = {}
        fatal: IntegrationError | None = None
        try:
            credentials = adapter.authenticate(integration)
        except (AuthenticationError, MissingCredentialsError, ExternalApiError) as exc:
            logger.warning("Sync of integration %s aborted: %s", integration.id, exc.message)
            fatal = exc
        else:
            ctx = SyncContext(
                integration=integration,
                credentials=credentials,
                reconciler=ReconciliationEngine(self.db, integration),
            )
            for entity in entities:
                details[entity.value] = self._sync_entity(adapter, ctx, entity).to_operations()

        synced = sum(int(ops["synced"]) for ops in details.values())
        errors = sum(len(ops["errors"]) for ops in details.values())
        if fatal is not None:
            errors += 1
        status = run_status(synced, errors, fatal=fatal is not None)
        completed_at = utc_now()

        history = self.history_repo.create(
            IntegrationSyncHistoryCreate(
                integration_id=coerce_uuid(integration.id),
                sync_type=sync_type.value,
                status=status.value,
                synced_count=synced,
                error_count=errors,
                operations=details,
                error_message=fatal.message[:1000] if fatal is not None else None,
                started_at=started_at,
                completed_at=completed_at,
                duration_ms=int((time.monotonic() - clock) * 1000),
            )
        )

        old_status = str(integration.status)
        if status == SyncStatus.FAILED:
            new_status = IntegrationStatus.ERROR.value
            error_details: dict[str, Any] | None = {
                "error": fatal.code if fatal is not None else "sync_failed",
                "message": fatal.message if fatal is not None else f"{errors} errors, 0 synced",
                "history_id": str(history.id),
            }
        else:
            new_status = IntegrationStatus.ACTIVE.value
            error_details = None
        self.integration_repo.record_sync(integration, new_status, completed_at, error_details)

        self.audit.log_for(
            integration,
            AuditAction.SYNCED,
            changes={"sync_type": sync_type.value, "status": status.value},
            metadata={"synced": synced, "errors": errors, "history_id": str(history.id)},
        )
        if old_status != new_status:
            self.audit.log_status_change(integration, old_status, new_status)

        logger.info(
            "Finished %s sync of integration %s: %s, %d synced, %d errors",
            sync_type.value,
            integration.id,
            status.value,
            synced,
            errors,
        )
        return SyncRunResult(
            success=status != SyncStatus.FAILED,
            provider=provider,
            synced=synced,
            errors=errors,
            status=status.value,
            history_id=coerce_uuid(history.id),
            error=fatal.message if fatal is not None else None,
            details=details,
        )

    def _sync_entity(
        self, adapter: IntegrationAdapter, ctx: SyncContext, entity: SyncType
    ) -> EntityResult:
        method = getattr(adapter, ENTITY_METHODS[entity])
        try:
            return method(ctx)  # type: ignore[no-any-return]
        except IntegrationError as exc:
            logger.warning(
                "%s sync of integration %s failed: %s", entity.value, ctx.integration.id, exc
            )
            return EntityResult(errors=[exc.message])
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning(
                "%s sync of integration %s hit a database error: %s",
                entity.value,
                ctx.integration.id,
                exc,
            )
            return EntityResult(errors=[f"database error: {exc}"])
        except Exception as exc:
            logger.exception("%s sync of integration %s crashed", entity.value, ctx.integration.id)
            return EntityResult(errors=[f"unexpected error: {exc}"])
