"""API keys: how a caller of the sync API proves which company it acts for."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, String, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class ApiKeyStatus(str, Enum):
    ACTIVE = "active"
    REVOKED = "revoked"


class ApiKey(Base):
    """Only the SHA-256 hash of a key is stored; the raw key is shown once."""

    __tablename__ = "api_keys"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    company_id = Column(
        UUIDType,
        ForeignKey("companies.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=True)
    key_hash = Column(String(64), nullable=False, unique=True, index=True)
    # first characters of the raw key, enough to tell keys apart in listings
    key_prefix = Column(String(12), nullable=False)
    status = Column(String(20), nullable=False, default=ApiKeyStatus.ACTIVE.value)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    last_used_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
