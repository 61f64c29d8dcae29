"""IntegrationSyncHistory model for tracking sync runs."""

from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class SyncType(str, Enum):
    """Entity classes a sync run can cover."""

    FULL = "full"
    OPPORTUNITIES = "opportunities"
    CONTACTS = "contacts"
    ADVERTISERS = "advertisers"
    INVENTORY = "inventory"


class SyncStatus(str, Enum):
    """Outcome of a sync run."""

    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    FAILED = "failed"


class IntegrationSyncHistory(Base):
    """One row per sync run. Rows are never updated after insert."""

    __tablename__ = "integration_sync_history"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    integration_id = Column(
        UUIDType,
        ForeignKey("integrations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sync_type = Column(String(30), nullable=False, default=SyncType.FULL.value)
    status = Column(String(30), nullable=False)
    synced_count = Column(Integer, nullable=False, default=0)
    error_count = Column(Integer, nullable=False, default=0)
    operations = Column(JSON, nullable=False, default=dict)
    error_message = Column(String(1000), nullable=True)
    duration_ms = Column(Integer, nullable=True)

    started_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
