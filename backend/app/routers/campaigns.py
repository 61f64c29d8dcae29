"""Local campaigns that can be pushed to an ad server."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.auth import get_current_company
from app.core.database import get_db
from app.models.campaign import Campaign
from app.repositories.ad_space_repository import AdSpaceRepository
from app.repositories.campaign_ad_space_repository import CampaignAdSpaceRepository
from app.repositories.campaign_repository import CampaignRepository
from app.repositories.integration_repository import IntegrationRepository
from app.schemas.campaign import CampaignCreate, CampaignResponse, CampaignUpdate

router = APIRouter()


@router.post(
    "/",
    response_model=CampaignResponse,
    status_code=201,
    summary="Create campaign",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Ad space or integration not found"},
        422: {"description": "Validation error"},
    },
)
async def create_campaign(
    data: CampaignCreate,
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> Campaign:
    """Create a campaign, optionally booked onto existing ad spaces.

    A campaign created for an integration is removed when that integration
    is deleted.
    """
    if data.integration_id and not IntegrationRepository(db).get_by_id(
        data.integration_id, company_id
    ):
        raise HTTPException(status_code=404, detail=f"Integration {data.integration_id} not found")
    ad_space_repo = AdSpaceRepository(db)
    for ad_space_id in data.ad_space_ids:
        if not ad_space_repo.get_by_id(ad_space_id, company_id):
            raise HTTPException(status_code=404, detail=f"Ad space {ad_space_id} not found")

    campaign = CampaignRepository(db).create(data, company_id)
    junction_repo = CampaignAdSpaceRepository(db)
    for ad_space_id in data.ad_space_ids:
        junction_repo.create(campaign.id, ad_space_id)  # type: ignore[arg-type]
    return campaign


@router.get(
    "/",
    response_model=list[CampaignResponse],
    summary="List campaigns",
    responses={401: {"description": "Unauthorized"}},
)
async def list_campaigns(
    response: Response,
    status: str | None = Query(default=None),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> list[Campaign]:
    repo = CampaignRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(company_id))
    return repo.get_all(company_id, status=status, skip=skip, limit=limit, order_by=order_by)


@router.get(
    "/{campaign_id}",
    response_model=CampaignResponse,
    summary="Get campaign",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Campaign not found"},
    },
)
async def get_campaign(
    campaign_id: UUID,
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> Campaign:
    campaign = CampaignRepository(db).get_by_id(campaign_id, company_id)
    if not campaign:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return campaign


@router.put(
    "/{campaign_id}",
    response_model=CampaignResponse,
    summary="Update campaign",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Campaign not found"},
        422: {"description": "Validation error"},
    },
)
async def update_campaign(
    campaign_id: UUID,
    data: CampaignUpdate,
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> Campaign:
    repo = CampaignRepository(db)
    campaign = repo.get_by_id(campaign_id, company_id)
    if not campaign:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return repo.update(campaign, data)
