"""Repository for AuditLog rows."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Query, Session

from app.models.audit_log import AuditLog


class AuditLogRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        *,
        company_id: UUID,
        resource_type: str,
        resource_id: UUID,
        action: str,
        changes: dict[str, Any],
        actor_type: str = "system",
        actor_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditLog:
        audit_log = AuditLog(
            company_id=company_id,
            resource_type=resource_type,
            resource_id=resource_id,
            action=action,
            changes=changes,
            actor_type=actor_type,
            actor_id=actor_id,
            metadata_=metadata,
        )
        self.db.add(audit_log)
        self.db.commit()
        self.db.refresh(audit_log)
        return audit_log

    def _company_query(
        self,
        company_id: UUID,
        resource_type: str | None = None,
        action: str | None = None,
        since: datetime | None = None,
    ) -> Query[AuditLog]:
        query = self.db.query(AuditLog).filter(AuditLog.company_id == company_id)
        if resource_type is not None:
            query = query.filter(AuditLog.resource_type == resource_type)
        if action is not None:
            query = query.filter(AuditLog.action == action)
        if since is not None:
            query = query.filter(AuditLog.created_at >= since)
        return query

    def get_all(
        self,
        company_id: UUID,
        skip: int = 0,
        limit: int = 100,
        resource_type: str | None = None,
        action: str | None = None,
        since: datetime | None = None,
    ) -> list[AuditLog]:
        query = self._company_query(company_id, resource_type, action, since)
        return query.order_by(AuditLog.created_at.desc()).offset(skip).limit(limit).all()

    def count(
        self,
        company_id: UUID,
        resource_type: str | None = None,
        action: str | None = None,
        since: datetime | None = None,
    ) -> int:
        return self._company_query(company_id, resource_type, action, since).count()

    def get_by_resource(
        self,
        resource_type: str,
        resource_id: UUID,
        company_id: UUID | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AuditLog]:
        """Trail of one integration or campaign, newest first."""
        query = self.db.query(AuditLog).filter(
            AuditLog.resource_type == resource_type,
            AuditLog.resource_id == resource_id,
        )
        if company_id is not None:
            query = query.filter(AuditLog.company_id == company_id)
        return query.order_by(AuditLog.created_at.desc()).offset(skip).limit(limit).all()
