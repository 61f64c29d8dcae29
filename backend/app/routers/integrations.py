"""Integrations router: connections, sync runs, forecasts, campaign push and deletion."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.core.auth import get_current_company
from app.core.database import get_db
from app.models.campaign import Campaign
from app.models.integration import Integration
from app.models.integration_mapping import IntegrationMapping
from app.models.integration_sync_history import IntegrationSyncHistory, SyncStatus, SyncType
from app.repositories.campaign_repository import CampaignRepository
from app.repositories.integration_mapping_repository import IntegrationMappingRepository
from app.repositories.integration_repository import IntegrationRepository
from app.repositories.integration_sync_history_repository import IntegrationSyncHistoryRepository
from app.schemas.campaign_push import (
    CampaignPushResponse,
    CampaignToggleRequest,
    CampaignToggleResponse,
)
from app.schemas.deletion import IntegrationDeleteResponse
from app.schemas.forecast import ForecastJobResponse, ForecastRequest
from app.schemas.integration import (
    IntegrationCreate,
    IntegrationResponse,
    IntegrationUpdate,
    OAuthCallbackRequest,
)
from app.schemas.integration_mapping import IntegrationMappingResponse
from app.schemas.integration_sync_history import IntegrationSyncHistoryResponse
from app.schemas.sync import SyncRequest, SyncResultResponse
from app.services.integrations.async_jobs import AsyncJobTracker, ForecastJobSpec
from app.services.integrations.campaign_push import CampaignPushCoordinator
from app.services.integrations.credentials import CredentialResolver
from app.services.integrations.deletion import IntegrationDeletionService
from app.services.integrations.errors import NotFoundError
from app.services.integrations.orchestrator import SyncOrchestrator

router = APIRouter()


def _get_integration_or_404(
    integration_id: UUID,
    company_id: UUID,
    db: Session,
) -> Integration:
    """Fetch an integration of the caller's company or raise 404."""
    repo = IntegrationRepository(db)
    integration = repo.get_by_id(integration_id, company_id)
    if not integration:
        raise NotFoundError("Integration", integration_id)
    return integration


def _get_campaign_or_404(campaign_id: UUID, company_id: UUID, db: Session) -> Campaign:
    campaign = CampaignRepository(db).get_by_id(campaign_id, company_id)
    if not campaign:
        raise NotFoundError("Campaign", campaign_id)
    return campaign


@router.post(
    "/",
    response_model=IntegrationResponse,
    status_code=201,
    summary="Create integration",
    responses={
        401: {"description": "Unauthorized"},
        422: {"description": "Validation error"},
    },
)
async def create_integration(
    data: IntegrationCreate,
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> Integration:
    """Create a new integration."""
    return IntegrationRepository(db).create(data, company_id)


@router.get(
    "/",
    response_model=list[IntegrationResponse],
    summary="List integrations",
    responses={401: {"description": "Unauthorized"}},
)
async def list_integrations(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> list[Integration]:
    """List integrations for the company."""
    repo = IntegrationRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(company_id))
    return repo.get_all(company_id, skip=skip, limit=limit, order_by=order_by)


@router.get(
    "/{integration_id}",
    response_model=IntegrationResponse,
    summary="Get integration",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Integration not found"},
    },
)
async def get_integration(
    integration_id: UUID,
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> Integration:
    """Get an integration by ID."""
    return _get_integration_or_404(integration_id, company_id, db)


@router.put(
    "/{integration_id}",
    response_model=IntegrationResponse,
    summary="Update integration",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Integration not found"},
        422: {"description": "Validation error"},
    },
)
async def update_integration(
    integration_id: UUID,
    data: IntegrationUpdate,
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> Integration:
    """Update an integration's settings."""
    integration = IntegrationRepository(db).update(integration_id, data, company_id)
    if not integration:
        raise NotFoundError("Integration", integration_id)
    return integration


@router.delete(
    "/{integration_id}",
    response_model=IntegrationDeleteResponse,
    summary="Delete integration and everything derived from it",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Integration not found"},
    },
)
async def delete_integration(
    integration_id: UUID,
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> dict[str, Any]:
    """Remove an integration with its mappings, history, campaigns and ad spaces."""
    integration = _get_integration_or_404(integration_id, company_id, db)
    result = IntegrationDeletionService(db).delete(integration)
    return result.to_dict()


@router.post(
    "/{integration_id}/sync",
    response_model=SyncResultResponse,
    summary="Run a sync",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Integration not found"},
        409: {"description": "A sync of this integration is already running"},
        422: {"description": "Unsupported provider"},
    },
)
async def run_sync(
    integration_id: UUID,
    data: SyncRequest | None = None,
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> dict[str, Any]:
    """Pull records from the provider and reconcile them into local records."""
    integration = _get_integration_or_404(integration_id, company_id, db)
    request = data or SyncRequest()
    return SyncOrchestrator(db).run(integration, request.sync_type).to_dict()


@router.post(
    "/{integration_id}/oauth/callback",
    response_model=IntegrationResponse,
    summary="Complete OAuth authorization",
    responses={
        400: {"description": "OAuth client credentials missing"},
        401: {"description": "Unauthorized"},
        404: {"description": "Integration not found"},
        422: {"description": "Provider does not use OAuth"},
        502: {"description": "Provider rejected the authorization code"},
    },
)
async def complete_oauth(
    integration_id: UUID,
    data: OAuthCallbackRequest,
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> Integration:
    """Exchange an authorization code and store the refresh token on the integration."""
    integration = _get_integration_or_404(integration_id, company_id, db)
    credentials = CredentialResolver().exchange_authorization_code(
        integration, data.code, data.redirect_uri
    )
    return IntegrationRepository(db).set_credentials(integration, credentials)


# ─────────────────────────────────────────────────────────────────────────────
# Forecasts
# ─────────────────────────────────────────────────────────────────────────────


@router.post(
    "/{integration_id}/forecasts",
    response_model=ForecastJobResponse,
    status_code=202,
    summary="Start a forecast",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Integration not found"},
        422: {"description": "Invalid job spec or provider cannot forecast"},
        502: {"description": "Provider error"},
    },
)
async def start_forecast(
    integration_id: UUID,
    data: ForecastRequest,
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> dict[str, Any]:
    """Submit a forecast job to the provider."""
    integration = _get_integration_or_404(integration_id, company_id, db)
    spec = ForecastJobSpec(
        kind=data.job_kind,
        start_date=data.start_date,
        end_date=data.end_date,
        priority=data.priority,
        targeting=data.targeting,
        sampling=data.sampling,
    )
    return AsyncJobTracker().start(integration, spec).to_dict()


@router.get(
    "/{integration_id}/forecasts/{job_id}",
    response_model=ForecastJobResponse,
    summary="Poll a forecast",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Integration not found"},
        502: {"description": "Provider error"},
    },
)
async def poll_forecast(
    integration_id: UUID,
    job_id: str,
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> dict[str, Any]:
    """Get the current state of a forecast job."""
    integration = _get_integration_or_404(integration_id, company_id, db)
    return AsyncJobTracker().poll(integration, job_id).to_dict()


# ─────────────────────────────────────────────────────────────────────────────
# Campaign push / toggle
# ─────────────────────────────────────────────────────────────────────────────


@router.post(
    "/{integration_id}/campaigns/{campaign_id}/push",
    response_model=CampaignPushResponse,
    summary="Push a campaign to the ad server",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Integration or campaign not found"},
        422: {"description": "Provider cannot receive campaigns"},
        502: {"description": "Provider error"},
    },
)
async def push_campaign(
    integration_id: UUID,
    campaign_id: UUID,
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> dict[str, Any]:
    """Create or update the campaign on the ad server and fan out its flights."""
    integration = _get_integration_or_404(integration_id, company_id, db)
    campaign = _get_campaign_or_404(campaign_id, company_id, db)
    return CampaignPushCoordinator(db).push(campaign, integration).to_dict()


@router.post(
    "/{integration_id}/campaigns/{campaign_id}/toggle",
    response_model=CampaignToggleResponse,
    summary="Activate or pause a pushed campaign",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Integration or campaign not found"},
        409: {"description": "Campaign has not been pushed"},
        502: {"description": "Provider error"},
    },
)
async def toggle_campaign(
    integration_id: UUID,
    campaign_id: UUID,
    data: CampaignToggleRequest,
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> dict[str, Any]:
    """Flip the campaign and its flights on the ad server, then locally."""
    integration = _get_integration_or_404(integration_id, company_id, db)
    campaign = _get_campaign_or_404(campaign_id, company_id, db)
    return CampaignPushCoordinator(db).toggle(campaign, integration, data.activate).to_dict()


# ─────────────────────────────────────────────────────────────────────────────
# Sub-resource endpoints: Mappings
# ─────────────────────────────────────────────────────────────────────────────


@router.get(
    "/{integration_id}/mappings",
    response_model=list[IntegrationMappingResponse],
    summary="List integration mappings",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Integration not found"},
    },
)
async def list_integration_mappings(
    integration_id: UUID,
    response: Response,
    mappable_type: str | None = Query(default=None),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> list[IntegrationMapping]:
    """List local-to-external mappings for an integration."""
    _get_integration_or_404(integration_id, company_id, db)
    repo = IntegrationMappingRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(integration_id, mappable_type))
    return repo.get_all(
        integration_id, mappable_type=mappable_type, skip=skip, limit=limit, order_by=order_by
    )


# ─────────────────────────────────────────────────────────────────────────────
# Sub-resource endpoints: Sync History
# ─────────────────────────────────────────────────────────────────────────────


@router.get(
    "/{integration_id}/sync_history",
    response_model=list[IntegrationSyncHistoryResponse],
    summary="List integration sync history",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Integration not found"},
    },
)
async def list_integration_sync_history(
    integration_id: UUID,
    response: Response,
    status: SyncStatus | None = Query(default=None),
    sync_type: SyncType | None = Query(default=None),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> list[IntegrationSyncHistory]:
    """List sync runs of an integration, most recent first."""
    _get_integration_or_404(integration_id, company_id, db)
    repo = IntegrationSyncHistoryRepository(db)
    filters = {
        "status": status.value if status else None,
        "sync_type": sync_type.value if sync_type else None,
    }
    response.headers["X-Total-Count"] = str(repo.count(integration_id, **filters))
    return repo.get_all(integration_id, skip=skip, limit=limit, **filters)
