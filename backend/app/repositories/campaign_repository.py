from __future__ import annotations

from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.sorting import apply_order_by
from app.models.campaign import Campaign
from app.schemas.campaign import CampaignCreate, CampaignUpdate


class CampaignRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        company_id: UUID,
        status: str | None = None,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
    ) -> list[Campaign]:
        query = self.db.query(Campaign).filter(Campaign.company_id == company_id)
        if status is not None:
            query = query.filter(Campaign.status == status)
        query = apply_order_by(query, Campaign, order_by)
        return query.offset(skip).limit(limit).all()

    def count(self, company_id: UUID) -> int:
        return self.db.query(Campaign).filter(Campaign.company_id == company_id).count()

    def get_by_id(self, campaign_id: UUID, company_id: UUID | None = None) -> Campaign | None:
        query = self.db.query(Campaign).filter(Campaign.id == campaign_id)
        if company_id is not None:
            query = query.filter(Campaign.company_id == company_id)
        return query.first()

    def create(self, data: CampaignCreate, company_id: UUID) -> Campaign:
        campaign = Campaign(
            company_id=company_id,
            **data.model_dump(exclude={"ad_space_ids", "status"}),
            status=data.status.value,
        )
        self.db.add(campaign)
        self.db.commit()
        self.db.refresh(campaign)
        return campaign

    def update(self, campaign: Campaign, data: CampaignUpdate) -> Campaign:
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(campaign, key, value.value if key == "status" and value else value)
        self.db.commit()
        self.db.refresh(campaign)
        return campaign

    def set_status(self, campaign: Campaign, status: str) -> Campaign:
        campaign.status = status  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(campaign)
        return campaign

    def get_ids_by_integration(self, integration_id: UUID) -> list[UUID]:
        rows = self.db.query(Campaign.id).filter(Campaign.integration_id == integration_id).all()
        return [row[0] for row in rows]

    def get_ids_by_description_markers(self, company_id: UUID, markers: list[str]) -> list[UUID]:
        """Campaigns with no provenance whose description mentions one of ``markers``."""
        if not markers:
            return []
        rows = (
            self.db.query(Campaign.id)
            .filter(
                Campaign.company_id == company_id,
                Campaign.integration_id.is_(None),
                or_(*[Campaign.description.ilike(f"%{marker}%") for marker in markers]),
            )
            .all()
        )
        return [row[0] for row in rows]

    def delete_many(self, campaign_ids: list[UUID]) -> int:
        if not campaign_ids:
            return 0
        count = (
            self.db.query(Campaign)
            .filter(Campaign.id.in_(campaign_ids))
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return int(count)
