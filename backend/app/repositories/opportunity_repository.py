from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.sorting import apply_order_by
from app.models.opportunity import Opportunity


class OpportunityRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        company_id: UUID,
        source: str | None = None,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
    ) -> list[Opportunity]:
        query = self.db.query(Opportunity).filter(Opportunity.company_id == company_id)
        if source is not None:
            query = query.filter(Opportunity.source == source)
        query = apply_order_by(query, Opportunity, order_by)
        return query.offset(skip).limit(limit).all()

    def get_by_natural_key(
        self, company_id: UUID, natural_key: str, source: str
    ) -> Opportunity | None:
        return (
            self.db.query(Opportunity)
            .filter(
                Opportunity.company_id == company_id,
                Opportunity.natural_key == natural_key,
                Opportunity.source == source,
            )
            .first()
        )

    def count(self, company_id: UUID) -> int:
        return self.db.query(Opportunity).filter(Opportunity.company_id == company_id).count()

    def create(self, **fields: Any) -> Opportunity:
        opportunity = Opportunity(**fields)
        self.db.add(opportunity)
        self.db.commit()
        self.db.refresh(opportunity)
        return opportunity

    def update(self, opportunity: Opportunity, fields: dict[str, Any]) -> Opportunity:
        for key, value in fields.items():
            setattr(opportunity, key, value)
        self.db.commit()
        self.db.refresh(opportunity)
        return opportunity

    def detach_integration(self, integration_id: UUID) -> int:
        """Clear provenance of opportunities derived from an integration."""
        count = (
            self.db.query(Opportunity)
            .filter(Opportunity.integration_id == integration_id)
            .update({Opportunity.integration_id: None}, synchronize_session=False)
        )
        self.db.commit()
        return int(count)
