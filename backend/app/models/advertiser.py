from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class Advertiser(Base):
    """Advertiser account. Merged on (company, name) regardless of which provider reported it."""

    __tablename__ = "advertisers"
    __table_args__ = (
        UniqueConstraint("company_id", "name", name="uq_advertisers_company_name"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    company_id = Column(
        UUIDType,
        ForeignKey("companies.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    integration_id = Column(
        UUIDType,
        ForeignKey("integrations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    name = Column(String(255), nullable=False)
    source = Column(String(50), nullable=False)
    external_id = Column(String(255), nullable=True)
    website = Column(String(2048), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
