"""Read-only views of records imported by sync runs."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class OpportunityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    integration_id: UUID | None = None
    natural_key: str
    source: str
    external_id: str | None = None
    name: str
    description: str | None = None
    amount_cents: int
    currency: str
    stage: str
    probability: int
    close_date: date | None = None
    advertiser_name: str | None = None
    last_activity_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ContactResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    integration_id: UUID | None = None
    natural_key: str
    source: str
    external_id: str | None = None
    first_name: str
    last_name: str
    email: str | None = None
    phone: str | None = None
    job_title: str | None = None
    company_name: str | None = None
    website: str | None = None
    created_at: datetime
    updated_at: datetime


class AdvertiserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    integration_id: UUID | None = None
    name: str
    source: str
    external_id: str | None = None
    website: str | None = None
    created_at: datetime
    updated_at: datetime


class AdSpaceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    integration_id: UUID | None = None
    name: str
    type: str
    size: str | None = None
    location: str | None = None
    base_price_cents: int | None = None
    price_model: str
    currency: str
    status: str
    created_at: datetime
    updated_at: datetime
