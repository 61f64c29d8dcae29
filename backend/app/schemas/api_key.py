from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ApiKeyCreate(BaseModel):
    name: str | None = Field(default=None, max_length=255, examples=["CRM sync job"])
    expires_at: datetime | None = Field(
        default=None, description="Keys without an expiry stay valid until revoked"
    )


class ApiKeyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    name: str | None
    key_prefix: str
    status: str
    expires_at: datetime | None
    last_used_at: datetime | None
    created_at: datetime
    updated_at: datetime


class ApiKeyCreateResponse(ApiKeyResponse):
    """Carries ``raw_key``, which is never retrievable again."""

    raw_key: str
