"""Audit log API endpoints."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.core.auth import get_current_company
from app.core.database import get_db
from app.models.audit_log import AuditAction, AuditResource
from app.repositories.audit_log_repository import AuditLogRepository
from app.schemas.audit_log import AuditLogResponse

router = APIRouter()


@router.get(
    "/",
    response_model=list[AuditLogResponse],
    summary="List audit logs",
    responses={401: {"description": "Unauthorized – invalid or missing API key"}},
)
async def list_audit_logs(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    resource_type: AuditResource | None = None,
    action: AuditAction | None = None,
    since: datetime | None = Query(default=None, description="Only entries created at or after"),
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> list[AuditLogResponse]:
    """List audit logs of sync runs, pushes, toggles and deletions, newest first."""
    repo = AuditLogRepository(db)
    filters = {
        "resource_type": resource_type.value if resource_type else None,
        "action": action.value if action else None,
        "since": since,
    }
    response.headers["X-Total-Count"] = str(repo.count(company_id, **filters))
    return [
        AuditLogResponse.model_validate(log)
        for log in repo.get_all(company_id, skip=skip, limit=limit, **filters)
    ]


@router.get(
    "/{resource_type}/{resource_id}",
    response_model=list[AuditLogResponse],
    summary="Get audit trail for an integration or campaign",
    responses={401: {"description": "Unauthorized – invalid or missing API key"}},
)
async def get_resource_audit_trail(
    resource_type: AuditResource,
    resource_id: UUID,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> list[AuditLogResponse]:
    """Trail of one resource. Deleted integrations keep their trail."""
    logs = AuditLogRepository(db).get_by_resource(
        resource_type.value, resource_id, company_id, skip=skip, limit=limit
    )
    return [AuditLogResponse.model_validate(log) for log in logs]
