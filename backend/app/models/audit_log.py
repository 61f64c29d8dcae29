"""Audit trail of sync runs, campaign pushes and toggles, and integration deletions."""

from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, String, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class AuditResource(str, Enum):
    INTEGRATION = "integration"
    CAMPAIGN = "campaign"


class AuditAction(str, Enum):
    SYNCED = "synced"
    PUSHED = "pushed"
    STATUS_CHANGED = "status_changed"
    DELETED = "deleted"


class AuditLog(Base):
    """One row per audited action.

    ``resource_id`` is not a foreign key: the trail of a deleted integration
    outlives it.
    """

    __tablename__ = "audit_logs"
    __table_args__ = (Index("ix_audit_logs_resource", "resource_type", "resource_id"),)

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    company_id = Column(
        UUIDType,
        ForeignKey("companies.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    resource_type = Column(String(50), nullable=False)
    resource_id = Column(UUIDType, nullable=False)
    action = Column(String(50), nullable=False, index=True)
    changes = Column(JSON, nullable=False, default=dict)
    actor_type = Column(String(50), nullable=False, default="system")
    actor_id = Column(String(255), nullable=True)
    metadata_ = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
