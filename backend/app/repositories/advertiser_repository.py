from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.sorting import apply_order_by
from app.models.advertiser import Advertiser


class AdvertiserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        company_id: UUID,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
    ) -> list[Advertiser]:
        query = self.db.query(Advertiser).filter(Advertiser.company_id == company_id)
        query = apply_order_by(query, Advertiser, order_by)
        return query.offset(skip).limit(limit).all()

    def get_by_name(self, company_id: UUID, name: str) -> Advertiser | None:
        return (
            self.db.query(Advertiser)
            .filter(Advertiser.company_id == company_id, Advertiser.name == name)
            .first()
        )

    def count(self, company_id: UUID) -> int:
        return self.db.query(Advertiser).filter(Advertiser.company_id == company_id).count()

    def create(self, **fields: Any) -> Advertiser:
        advertiser = Advertiser(**fields)
        self.db.add(advertiser)
        self.db.commit()
        self.db.refresh(advertiser)
        return advertiser

    def update(self, advertiser: Advertiser, fields: dict[str, Any]) -> Advertiser:
        for key, value in fields.items():
            setattr(advertiser, key, value)
        self.db.commit()
        self.db.refresh(advertiser)
        return advertiser

    def detach_integration(self, integration_id: UUID) -> int:
        count = (
            self.db.query(Advertiser)
            .filter(Advertiser.integration_id == integration_id)
            .update({Advertiser.integration_id: None}, synchronize_session=False)
        )
        self.db.commit()
        return int(count)
