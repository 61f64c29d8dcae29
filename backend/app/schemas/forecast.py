from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, Field


class ForecastRequest(BaseModel):
    job_kind: Literal["existing", "available", "deliverable"]
    start_date: date | None = None
    end_date: date | None = None
    priority: int | None = Field(default=None, ge=1, le=100)
    targeting: dict[str, Any] | None = None
    sampling: int | None = Field(default=None, ge=1)


class ForecastJobResponse(BaseModel):
    job_id: str
    status: Literal["queued", "running", "finished", "error"]
    progress: float | None = None
    result: dict[str, Any] | None = None
