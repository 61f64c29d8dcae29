"""Company resolution for every /v1 route except company creation."""

from datetime import datetime
from uuid import UUID

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.api_key import ApiKey, ApiKeyStatus
from app.models.shared import as_utc, utc_now
from app.repositories.api_key_repository import ApiKeyRepository


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"}
    )


def bearer_token(header: str | None) -> str:
    """Extract the raw key from an ``Authorization: Bearer <key>`` header."""
    if not header:
        raise _unauthorized("Authorization header is required")
    scheme, _, token = header.partition(" ")
    if scheme != "Bearer":
        raise _unauthorized("Invalid authorization header format")
    if not token.strip():
        raise _unauthorized("API key is required")
    return token.strip()


def ensure_usable(api_key: ApiKey | None, now: datetime) -> ApiKey:
    if api_key is None:
        raise _unauthorized("Invalid API key")
    if api_key.status == ApiKeyStatus.REVOKED.value:
        raise _unauthorized("API key has been revoked")
    if api_key.expires_at is not None and as_utc(api_key.expires_at) <= now:
        raise _unauthorized("API key has expired")
    return api_key


def get_current_company(
    request: Request,
    db: Session = Depends(get_db),
) -> UUID:
    """Resolve the caller's company from its API key.

    Integrations, campaigns and records of any other company are invisible
    to the caller; routes report them as not found.
    """
    raw_key = bearer_token(request.headers.get("Authorization"))
    repo = ApiKeyRepository(db)
    now = utc_now()
    api_key = ensure_usable(repo.get_by_raw_key(raw_key), now)
    repo.touch(api_key, now)
    return api_key.company_id  # type: ignore[return-value]
