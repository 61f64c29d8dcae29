"""Audit trail writes for integrations and campaigns."""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.audit_log import AuditAction, AuditResource
from app.models.campaign import Campaign
from app.models.integration import Integration
from app.models.shared import coerce_uuid
from app.repositories.audit_log_repository import AuditLogRepository

logger = logging.getLogger(__name__)


def resource_type_of(resource: Integration | Campaign) -> AuditResource:
    if isinstance(resource, Integration):
        return AuditResource.INTEGRATION
    return AuditResource.CAMPAIGN


class AuditService:
    """Records audit trail entries.

    Writes are fire-and-forget: a failed audit write is logged and never
    propagates to the operation being audited.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = AuditLogRepository(db)

    def log_event(
        self,
        resource_type: AuditResource | str,
        resource_id: UUID,
        company_id: UUID,
        action: AuditAction | str,
        changes: dict[str, Any] | None = None,
        actor_type: str = "system",
        actor_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        resource_type = AuditResource(resource_type).value
        action = AuditAction(action).value
        try:
            self.repo.create(
                company_id=company_id,
                resource_type=resource_type,
                resource_id=resource_id,
                action=action,
                changes=changes or {},
                actor_type=actor_type,
                actor_id=actor_id,
                metadata=metadata,
            )
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning(
                "Failed to write audit entry %s/%s %s: %s",
                resource_type,
                resource_id,
                action,
                exc,
            )

    def log_for(
        self,
        resource: Integration | Campaign,
        action: AuditAction,
        changes: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Audit an action against a loaded integration or campaign."""
        self.log_event(
            resource_type_of(resource),
            coerce_uuid(resource.id),
            coerce_uuid(resource.company_id),
            action,
            changes=changes,
            metadata=metadata,
        )

    def log_status_change(
        self, resource: Integration | Campaign, old_status: str, new_status: str
    ) -> None:
        self.log_for(
            resource,
            AuditAction.STATUS_CHANGED,
            changes={"status": {"old": old_status, "new": new_status}},
        )
