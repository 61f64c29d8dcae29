import hashlib
import secrets
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.api_key import ApiKey, ApiKeyStatus
from app.schemas.api_key import ApiKeyCreate

KEY_PREFIX = "ads_"


def generate_api_key() -> str:
    return KEY_PREFIX + secrets.token_hex(32)


def hash_api_key(raw_key: str) -> str:
    return hashlib.sha256(raw_key.encode()).hexdigest()


class ApiKeyRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, company_id: UUID, data: ApiKeyCreate) -> tuple[ApiKey, str]:
        """Issue a key for a company. Returns the stored row and the raw key."""
        raw_key = generate_api_key()
        api_key = ApiKey(
            company_id=company_id,
            name=data.name,
            key_hash=hash_api_key(raw_key),
            key_prefix=raw_key[:12],
            expires_at=data.expires_at,
        )
        self.db.add(api_key)
        self.db.commit()
        self.db.refresh(api_key)
        return api_key, raw_key

    def get_by_raw_key(self, raw_key: str) -> ApiKey | None:
        if not raw_key.startswith(KEY_PREFIX):
            return None
        return self.db.query(ApiKey).filter(ApiKey.key_hash == hash_api_key(raw_key)).first()

    def get_all(self, company_id: UUID) -> list[ApiKey]:
        return (
            self.db.query(ApiKey)
            .filter(ApiKey.company_id == company_id)
            .order_by(ApiKey.created_at.desc())
            .all()
        )

    def revoke(self, api_key_id: UUID, company_id: UUID) -> ApiKey | None:
        api_key = (
            self.db.query(ApiKey)
            .filter(ApiKey.id == api_key_id, ApiKey.company_id == company_id)
            .first()
        )
        if not api_key:
            return None
        api_key.status = ApiKeyStatus.REVOKED.value  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(api_key)
        return api_key

    def touch(self, api_key: ApiKey, now: datetime) -> None:
        api_key.last_used_at = now  # type: ignore[assignment]
        self.db.commit()
