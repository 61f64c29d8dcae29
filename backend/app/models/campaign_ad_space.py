"""Junction between campaigns and the ad spaces they book."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class CampaignAdSpace(Base):
    __tablename__ = "campaign_ad_spaces"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    campaign_id = Column(UUIDType, ForeignKey("campaigns.id"), nullable=False, index=True)
    ad_space_id = Column(UUIDType, ForeignKey("ad_spaces.id"), nullable=False, index=True)
    allocated_budget_cents = Column(Integer, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
