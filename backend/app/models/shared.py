"""Column types and value helpers shared by the sync models."""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import String, TypeDecorator
from sqlalchemy.engine import Dialect


def coerce_uuid(value: Any) -> uuid.UUID:
    """Accept a UUID or its string form (path params, provider payloads, JSON config)."""
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


class UUIDType(TypeDecorator[uuid.UUID]):
    """UUIDs stored as their 36-character string, so SQLite and PostgreSQL agree."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> str | None:
        return None if value is None else str(coerce_uuid(value))

    def process_result_value(self, value: Any, dialect: Dialect) -> uuid.UUID | None:
        return None if value is None else coerce_uuid(value)


def generate_uuid() -> uuid.UUID:
    return uuid.uuid4()


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Read a stored timestamp as UTC.

    SQLite hands ``DateTime(timezone=True)`` columns back without tzinfo;
    every timestamp this service writes is UTC, so a naive value is UTC too.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
