from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.campaign import CampaignStatus


class CampaignCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    start_date: date
    end_date: date
    budget_cents: int | None = Field(default=None, ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    status: CampaignStatus = CampaignStatus.DRAFT
    integration_id: UUID | None = Field(
        default=None, description="Integration the campaign is created for; deleted with it"
    )
    ad_space_ids: list[UUID] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_dates(self) -> "CampaignCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class CampaignUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    budget_cents: int | None = Field(default=None, ge=0)
    status: CampaignStatus | None = None


class CampaignResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    integration_id: UUID | None = None
    name: str
    description: str | None = None
    start_date: date
    end_date: date
    budget_cents: int | None = None
    currency: str
    status: str
    created_at: datetime
    updated_at: datetime
