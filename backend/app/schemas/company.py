from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.api_key import ApiKeyCreateResponse


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    default_currency: str = Field(default="USD", min_length=3, max_length=3)
    timezone: str = Field(default="UTC", max_length=50)


class CompanyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    default_currency: str
    timezone: str
    created_at: datetime
    updated_at: datetime


class CompanyCreateResponse(CompanyResponse):
    """Returned only on creation; carries the company's first API key."""

    api_key: ApiKeyCreateResponse
