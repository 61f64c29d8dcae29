"""Integration repository for data access."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.sorting import apply_order_by
from app.models.integration import Integration, IntegrationStatus
from app.schemas.integration import IntegrationCreate, IntegrationUpdate


class IntegrationRepository:
    """Repository for Integration model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        company_id: UUID,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
    ) -> list[Integration]:
        """Get all integrations for a company."""
        query = self.db.query(Integration).filter(Integration.company_id == company_id)
        query = apply_order_by(query, Integration, order_by)
        return query.offset(skip).limit(limit).all()

    def count(self, company_id: UUID) -> int:
        return self.db.query(Integration).filter(Integration.company_id == company_id).count()

    def get_by_id(
        self,
        integration_id: UUID,
        company_id: UUID | None = None,
    ) -> Integration | None:
        """Get an integration by ID, optionally scoped to a company."""
        query = self.db.query(Integration).filter(Integration.id == integration_id)
        if company_id is not None:
            query = query.filter(Integration.company_id == company_id)
        return query.first()

    def get_active_by_provider(self, provider_type: str) -> list[Integration]:
        """Get every active integration of a provider, across companies."""
        return (
            self.db.query(Integration)
            .filter(
                Integration.provider_type == provider_type,
                Integration.status == IntegrationStatus.ACTIVE.value,
            )
            .order_by(Integration.created_at.asc())
            .all()
        )

    def create(self, data: IntegrationCreate, company_id: UUID) -> Integration:
        """Create a new integration."""
        integration = Integration(
            company_id=company_id,
            name=data.name,
            integration_type=data.integration_type.value,
            provider_type=data.provider_type.value,
            status=data.status,
            credentials=data.credentials,
            configuration=data.configuration,
        )
        self.db.add(integration)
        self.db.commit()
        self.db.refresh(integration)
        return integration

    def update(
        self,
        integration_id: UUID,
        data: IntegrationUpdate,
        company_id: UUID,
    ) -> Integration | None:
        """Update an integration."""
        integration = self.get_by_id(integration_id, company_id)
        if not integration:
            return None
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(integration, key, value)
        self.db.commit()
        self.db.refresh(integration)
        return integration

    def record_sync(
        self,
        integration: Integration,
        status: str,
        synced_at: datetime,
        error_details: dict[str, Any] | None = None,
    ) -> Integration:
        """Stamp the outcome of a sync run onto the integration."""
        integration.status = status  # type: ignore[assignment]
        integration.last_sync_at = synced_at  # type: ignore[assignment]
        integration.error_details = error_details  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(integration)
        return integration

    def set_credentials(self, integration: Integration, credentials: dict[str, Any]) -> Integration:
        integration.credentials = credentials  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(integration)
        return integration

    def set_configuration_entry(
        self,
        integration: Integration,
        section: str,
        key: str,
        value: Any,
    ) -> Integration:
        """Set ``configuration[section][key]``, replacing the JSON value so the change is tracked."""
        configuration = dict(integration.configuration or {})
        entries = dict(configuration.get(section) or {})
        entries[key] = value
        configuration[section] = entries
        integration.configuration = configuration  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(integration)
        return integration

    def delete(self, integration: Integration) -> None:
        self.db.delete(integration)
        self.db.commit()
