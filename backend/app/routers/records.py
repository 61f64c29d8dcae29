"""Read-only listing of records imported by sync runs."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.core.auth import get_current_company
from app.core.database import get_db
from app.models.ad_space import AdSpace
from app.models.advertiser import Advertiser
from app.models.contact import Contact
from app.models.opportunity import Opportunity
from app.repositories.ad_space_repository import AdSpaceRepository
from app.repositories.advertiser_repository import AdvertiserRepository
from app.repositories.contact_repository import ContactRepository
from app.repositories.opportunity_repository import OpportunityRepository
from app.schemas.records import (
    AdSpaceResponse,
    AdvertiserResponse,
    ContactResponse,
    OpportunityResponse,
)

router = APIRouter()


@router.get(
    "/opportunities",
    response_model=list[OpportunityResponse],
    summary="List opportunities",
    responses={401: {"description": "Unauthorized"}},
)
async def list_opportunities(
    response: Response,
    source: str | None = Query(default=None),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> list[Opportunity]:
    repo = OpportunityRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(company_id))
    return repo.get_all(company_id, source=source, skip=skip, limit=limit, order_by=order_by)


@router.get(
    "/contacts",
    response_model=list[ContactResponse],
    summary="List contacts",
    responses={401: {"description": "Unauthorized"}},
)
async def list_contacts(
    response: Response,
    source: str | None = Query(default=None),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> list[Contact]:
    repo = ContactRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(company_id))
    return repo.get_all(company_id, source=source, skip=skip, limit=limit, order_by=order_by)


@router.get(
    "/advertisers",
    response_model=list[AdvertiserResponse],
    summary="List advertisers",
    responses={401: {"description": "Unauthorized"}},
)
async def list_advertisers(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> list[Advertiser]:
    repo = AdvertiserRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(company_id))
    return repo.get_all(company_id, skip=skip, limit=limit, order_by=order_by)


@router.get(
    "/ad_spaces",
    response_model=list[AdSpaceResponse],
    summary="List ad spaces",
    responses={401: {"description": "Unauthorized"}},
)
async def list_ad_spaces(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> list[AdSpace]:
    repo = AdSpaceRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(company_id))
    return repo.get_all(company_id, skip=skip, limit=limit, order_by=order_by)
