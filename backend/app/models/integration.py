"""Integration model for external CRM and ad-server connections."""

from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class IntegrationType(str, Enum):
    """Types of integrations."""

    CRM = "crm"
    AD_SERVER = "ad_server"


class IntegrationProviderType(str, Enum):
    """Supported integration providers."""

    SALESFORCE = "salesforce"
    HUBSPOT = "hubspot"
    PIPEDRIVE = "pipedrive"
    VTEX = "vtex"
    KEVEL = "kevel"


class IntegrationStatus(str, Enum):
    """Integration connection status."""

    ACTIVE = "active"
    ERROR = "error"
    DISABLED = "disabled"


class Integration(Base):
    """Integration model: a company's connection to an external platform.

    ``credentials`` is an opaque per-provider blob (refresh tokens, API keys).
    ``configuration`` holds provider settings such as the Kevel network id and
    the mirrored campaign map.
    """

    __tablename__ = "integrations"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    company_id = Column(
        UUIDType,
        ForeignKey("companies.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    integration_type = Column(String(30), nullable=False)
    provider_type = Column(String(50), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=IntegrationStatus.ACTIVE.value)
    credentials = Column(JSON, nullable=False, default=dict)
    configuration = Column(JSON, nullable=False, default=dict)
    last_sync_at = Column(DateTime(timezone=True), nullable=True)
    error_details = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
