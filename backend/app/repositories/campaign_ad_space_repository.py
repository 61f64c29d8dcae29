from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from app.models.campaign_ad_space import CampaignAdSpace


class CampaignAdSpaceRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, campaign_id: UUID, ad_space_id: UUID) -> CampaignAdSpace:
        link = CampaignAdSpace(campaign_id=campaign_id, ad_space_id=ad_space_id)
        self.db.add(link)
        self.db.commit()
        self.db.refresh(link)
        return link

    def get_by_campaign(self, campaign_id: UUID) -> list[CampaignAdSpace]:
        return (
            self.db.query(CampaignAdSpace).filter(CampaignAdSpace.campaign_id == campaign_id).all()
        )

    def delete_by_campaigns(self, campaign_ids: list[UUID]) -> int:
        if not campaign_ids:
            return 0
        count = (
            self.db.query(CampaignAdSpace)
            .filter(CampaignAdSpace.campaign_id.in_(campaign_ids))
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return int(count)

    def delete_by_ad_spaces(self, ad_space_ids: list[UUID]) -> int:
        if not ad_space_ids:
            return 0
        count = (
            self.db.query(CampaignAdSpace)
            .filter(CampaignAdSpace.ad_space_id.in_(ad_space_ids))
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return int(count)
