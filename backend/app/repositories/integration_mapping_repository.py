"""Links between local resources and the ids a provider gave them."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Query, Session

from app.core.sorting import apply_order_by
from app.models.integration_mapping import IntegrationMapping
from app.schemas.integration_mapping import IntegrationMappingCreate, IntegrationMappingUpdate


class IntegrationMappingRepository:
    def __init__(self, db: Session):
        self.db = db

    def _query(self, integration_id: UUID, mappable_type: str | None) -> Query[IntegrationMapping]:
        query = self.db.query(IntegrationMapping).filter(
            IntegrationMapping.integration_id == integration_id
        )
        if mappable_type is not None:
            query = query.filter(IntegrationMapping.mappable_type == mappable_type)
        return query

    def get_all(
        self,
        integration_id: UUID,
        mappable_type: str | None = None,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
    ) -> list[IntegrationMapping]:
        query = apply_order_by(self._query(integration_id, mappable_type), IntegrationMapping, order_by)
        return query.offset(skip).limit(limit).all()

    def count(self, integration_id: UUID, mappable_type: str | None = None) -> int:
        return self._query(integration_id, mappable_type).count()

    def get_by_mappable(
        self,
        integration_id: UUID,
        mappable_type: str,
        mappable_id: UUID,
    ) -> IntegrationMapping | None:
        """The mapping of one local resource; at most one exists per integration."""
        return (
            self._query(integration_id, mappable_type)
            .filter(IntegrationMapping.mappable_id == mappable_id)
            .first()
        )

    def create(self, data: IntegrationMappingCreate) -> IntegrationMapping:
        mapping = IntegrationMapping(**data.model_dump())
        self.db.add(mapping)
        self.db.commit()
        self.db.refresh(mapping)
        return mapping

    def update(
        self, mapping: IntegrationMapping, data: IntegrationMappingUpdate
    ) -> IntegrationMapping:
        """Apply the fields set on ``data``; a re-push refreshes the row this way."""
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(mapping, key, value)
        self.db.commit()
        self.db.refresh(mapping)
        return mapping

    def delete_by_integration(self, integration_id: UUID) -> int:
        count = self._query(integration_id, None).delete(synchronize_session=False)
        self.db.commit()
        return int(count)
