from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.sorting import apply_order_by
from app.models.ad_space import AdSpace


class AdSpaceRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        company_id: UUID,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
    ) -> list[AdSpace]:
        query = self.db.query(AdSpace).filter(AdSpace.company_id == company_id)
        query = apply_order_by(query, AdSpace, order_by)
        return query.offset(skip).limit(limit).all()

    def get_by_id(self, ad_space_id: UUID, company_id: UUID | None = None) -> AdSpace | None:
        query = self.db.query(AdSpace).filter(AdSpace.id == ad_space_id)
        if company_id is not None:
            query = query.filter(AdSpace.company_id == company_id)
        return query.first()

    def get_by_name(self, company_id: UUID, name: str) -> AdSpace | None:
        return (
            self.db.query(AdSpace)
            .filter(AdSpace.company_id == company_id, AdSpace.name == name)
            .first()
        )

    def count(self, company_id: UUID) -> int:
        return self.db.query(AdSpace).filter(AdSpace.company_id == company_id).count()

    def create(self, **fields: Any) -> AdSpace:
        ad_space = AdSpace(**fields)
        self.db.add(ad_space)
        self.db.commit()
        self.db.refresh(ad_space)
        return ad_space

    def update(self, ad_space: AdSpace, fields: dict[str, Any]) -> AdSpace:
        for key, value in fields.items():
            setattr(ad_space, key, value)
        self.db.commit()
        self.db.refresh(ad_space)
        return ad_space

    def get_ids_by_integration(self, integration_id: UUID) -> list[UUID]:
        rows = self.db.query(AdSpace.id).filter(AdSpace.integration_id == integration_id).all()
        return [row[0] for row in rows]

    def get_ids_by_location_markers(self, company_id: UUID, markers: list[str]) -> list[UUID]:
        """Ad spaces with no provenance whose location mentions one of ``markers``."""
        if not markers:
            return []
        rows = (
            self.db.query(AdSpace.id)
            .filter(
                AdSpace.company_id == company_id,
                AdSpace.integration_id.is_(None),
                or_(*[AdSpace.location.ilike(f"%{marker}%") for marker in markers]),
            )
            .all()
        )
        return [row[0] for row in rows]

    def delete_many(self, ad_space_ids: list[UUID]) -> int:
        if not ad_space_ids:
            return 0
        count = (
            self.db.query(AdSpace)
            .filter(AdSpace.id.in_(ad_space_ids))
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return int(count)
