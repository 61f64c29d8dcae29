from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class IntegrationSyncHistoryCreate(BaseModel):
    integration_id: UUID
    sync_type: str = Field(..., min_length=1, max_length=30)
    status: str = Field(..., min_length=1, max_length=30)
    synced_count: int = 0
    error_count: int = 0
    operations: dict[str, Any] = Field(default_factory=dict)
    error_message: str | None = Field(default=None, max_length=1000)
    started_at: datetime
    completed_at: datetime | None = None
    duration_ms: int | None = None


class IntegrationSyncHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    integration_id: UUID
    sync_type: str
    status: str
    synced_count: int
    error_count: int
    operations: dict[str, Any]
    error_message: str | None = None
    duration_ms: int | None = None
    started_at: datetime
    completed_at: datetime | None = None
    created_at: datetime
