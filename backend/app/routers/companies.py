"""Company management and API key endpoints."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.auth import get_current_company
from app.core.database import get_db
from app.models.api_key import ApiKey
from app.models.company import Company
from app.repositories.api_key_repository import ApiKeyRepository
from app.repositories.company_repository import CompanyRepository
from app.schemas.api_key import ApiKeyCreate, ApiKeyCreateResponse, ApiKeyResponse
from app.schemas.company import CompanyCreate, CompanyCreateResponse, CompanyResponse

router = APIRouter()


def _key_response(api_key: ApiKey, raw_key: str) -> ApiKeyCreateResponse:
    return ApiKeyCreateResponse(
        **ApiKeyResponse.model_validate(api_key).model_dump(),
        raw_key=raw_key,
    )


@router.post(
    "/",
    response_model=CompanyCreateResponse,
    status_code=201,
    summary="Create company",
    responses={422: {"description": "Validation error"}},
)
async def create_company(
    data: CompanyCreate,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Create a new company with an initial API key."""
    company = CompanyRepository(db).create(data)
    api_key, raw_key = ApiKeyRepository(db).create(
        company.id,  # type: ignore[arg-type]
        ApiKeyCreate(name="Initial API Key"),
    )

    company_response = CompanyResponse.model_validate(company).model_dump()
    company_response["api_key"] = _key_response(api_key, raw_key)
    return company_response


@router.get(
    "/current",
    response_model=CompanyResponse,
    summary="Get current company",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Company not found"},
    },
)
async def get_current(
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> Company:
    company = CompanyRepository(db).get_by_id(company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return company


@router.get(
    "/current/api_keys",
    response_model=list[ApiKeyResponse],
    summary="List API keys",
    responses={401: {"description": "Unauthorized"}},
)
async def list_api_keys(
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> list[ApiKey]:
    """List the company's keys, newest first. Raw keys are never returned."""
    return ApiKeyRepository(db).get_all(company_id)


@router.post(
    "/current/api_keys",
    response_model=ApiKeyCreateResponse,
    status_code=201,
    summary="Create API key",
    responses={401: {"description": "Unauthorized"}},
)
async def create_api_key(
    data: ApiKeyCreate,
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> ApiKeyCreateResponse:
    """Create an API key. The raw key is only ever returned here."""
    api_key, raw_key = ApiKeyRepository(db).create(company_id, data)
    return _key_response(api_key, raw_key)


@router.delete(
    "/current/api_keys/{api_key_id}",
    status_code=204,
    summary="Revoke API key",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "API key not found"},
    },
)
async def revoke_api_key(
    api_key_id: UUID,
    db: Session = Depends(get_db),
    company_id: UUID = Depends(get_current_company),
) -> None:
    if not ApiKeyRepository(db).revoke(api_key_id, company_id):
        raise HTTPException(status_code=404, detail="API key not found")
