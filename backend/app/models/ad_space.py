from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class AdSpace(Base):
    __tablename__ = "ad_spaces"
    __table_args__ = (UniqueConstraint("company_id", "name", name="uq_ad_spaces_company_name"),)

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    company_id = Column(
        UUIDType,
        ForeignKey("companies.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    # Set when the ad space was imported from an integration
    integration_id = Column(
        UUIDType,
        ForeignKey("integrations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    name = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False, default="display")
    size = Column(String(50), nullable=True)
    location = Column(String(2048), nullable=True)
    base_price_cents = Column(Integer, nullable=True)
    price_model = Column(String(20), nullable=False, default="cpm")
    currency = Column(String(3), nullable=False, default="USD")
    status = Column(String(20), nullable=False, default="available")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
