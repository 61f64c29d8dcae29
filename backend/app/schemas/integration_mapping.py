"""Schemas for links between local resources and their ad-server counterparts."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.integration_mapping import MappableType


class PushState(BaseModel):
    """What the last push left on the ad server."""

    external_parent_id: str | None = Field(
        default=None, max_length=255, description="Advertiser the pushed campaign belongs to"
    )
    external_data: dict[str, Any] | None = Field(
        default=None, description='Provider extras, e.g. {"sub_units": {zone_id: flight_id}}'
    )
    sub_units_created: int = Field(default=0, ge=0)
    pushed_at: datetime | None = None


class IntegrationMappingCreate(PushState):
    model_config = ConfigDict(use_enum_values=True)

    integration_id: UUID
    mappable_type: MappableType
    mappable_id: UUID
    external_id: str = Field(..., min_length=1, max_length=255)


class IntegrationMappingUpdate(BaseModel):
    external_id: str | None = Field(default=None, min_length=1, max_length=255)
    external_parent_id: str | None = Field(default=None, max_length=255)
    external_data: dict[str, Any] | None = None
    sub_units_created: int | None = Field(default=None, ge=0)
    pushed_at: datetime | None = None
    last_synced_at: datetime | None = None


class IntegrationMappingResponse(PushState):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    integration_id: UUID
    mappable_type: str
    mappable_id: UUID
    external_id: str
    last_synced_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
