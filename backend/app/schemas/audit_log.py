"""Pydantic schemas for AuditLog."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    resource_type: str
    resource_id: UUID
    action: str
    changes: dict[str, Any]
    # the ORM attribute is ``metadata_``; the API exposes it as ``metadata``
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="metadata_")
    actor_type: str
    actor_id: str | None
    created_at: datetime
