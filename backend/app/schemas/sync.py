from typing import Any
from uuid import UUID

from pydantic import BaseModel

from app.models.integration_sync_history import SyncType


class SyncRequest(BaseModel):
    sync_type: SyncType = SyncType.FULL


class SyncResultResponse(BaseModel):
    success: bool
    provider: str
    synced: int
    errors: int
    status: str
    history_id: UUID | None = None
    error: str | None = None
    details: dict[str, Any]
