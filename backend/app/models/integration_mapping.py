"""IntegrationMapping model for mapping local resources to external platform IDs."""

from enum import Enum

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class MappableType(str, Enum):
    """Local resource types that can be mapped to an external platform."""

    CAMPAIGN = "campaign"


class IntegrationMapping(Base):
    """Maps a local resource (campaign, ...) to its external platform ID.

    At most one mapping exists per (integration, resource); pushing an
    already-mapped resource again updates this row.
    """

    __tablename__ = "integration_mappings"
    __table_args__ = (
        UniqueConstraint(
            "integration_id",
            "mappable_type",
            "mappable_id",
            name="uq_integration_mappings_integration_type_id",
        ),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    integration_id = Column(
        UUIDType,
        ForeignKey("integrations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    mappable_type = Column(String(50), nullable=False)
    mappable_id = Column(UUIDType, nullable=False)
    external_id = Column(String(255), nullable=False)
    external_parent_id = Column(String(255), nullable=True)
    external_data = Column(JSON, nullable=True)
    sub_units_created = Column(Integer, nullable=False, default=0)
    pushed_at = Column(DateTime(timezone=True), nullable=True)
    last_synced_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
