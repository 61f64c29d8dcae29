from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.integration import IntegrationProviderType, IntegrationType


class IntegrationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    integration_type: IntegrationType
    provider_type: IntegrationProviderType
    status: str = Field(default="active", max_length=20)
    credentials: dict[str, Any] = Field(default_factory=dict)
    configuration: dict[str, Any] = Field(default_factory=dict)


class IntegrationUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    status: str | None = Field(default=None, max_length=20)
    credentials: dict[str, Any] | None = None
    configuration: dict[str, Any] | None = None
    error_details: dict[str, Any] | None = None


class IntegrationResponse(BaseModel):
    """Integration as returned by the API. Credentials are never echoed back."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    name: str
    integration_type: str
    provider_type: str
    status: str
    configuration: dict[str, Any]
    last_sync_at: datetime | None = None
    error_details: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime


class OAuthCallbackRequest(BaseModel):
    code: str = Field(..., min_length=1, description="Authorization code from the consent redirect")
    redirect_uri: str = Field(..., min_length=1, description="Redirect URI the code was issued to")
