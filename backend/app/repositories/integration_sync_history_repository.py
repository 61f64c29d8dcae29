"""Sync history rows: one per sync run that got past the lease."""

from uuid import UUID

from sqlalchemy.orm import Query, Session

from app.models.integration_sync_history import IntegrationSyncHistory
from app.schemas.integration_sync_history import IntegrationSyncHistoryCreate


class IntegrationSyncHistoryRepository:
    """Rows are insert-only; they leave only with their integration."""

    def __init__(self, db: Session):
        self.db = db

    def _query(
        self, integration_id: UUID, status: str | None, sync_type: str | None
    ) -> "Query[IntegrationSyncHistory]":
        query = self.db.query(IntegrationSyncHistory).filter(
            IntegrationSyncHistory.integration_id == integration_id
        )
        if status is not None:
            query = query.filter(IntegrationSyncHistory.status == status)
        if sync_type is not None:
            query = query.filter(IntegrationSyncHistory.sync_type == sync_type)
        return query

    def get_all(
        self,
        integration_id: UUID,
        status: str | None = None,
        sync_type: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[IntegrationSyncHistory]:
        """Runs of an integration, most recent first."""
        return (
            self._query(integration_id, status, sync_type)
            .order_by(IntegrationSyncHistory.started_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count(
        self, integration_id: UUID, status: str | None = None, sync_type: str | None = None
    ) -> int:
        return self._query(integration_id, status, sync_type).count()

    def create(self, data: IntegrationSyncHistoryCreate) -> IntegrationSyncHistory:
        entry = IntegrationSyncHistory(**data.model_dump())
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def delete_by_integration(self, integration_id: UUID) -> int:
        count = (
            self.db.query(IntegrationSyncHistory)
            .filter(IntegrationSyncHistory.integration_id == integration_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return int(count)
