"""Tests for API keys and company authentication."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from fastapi import HTTPException

from app.core.auth import bearer_token, ensure_usable, get_current_company
from app.models.api_key import ApiKey
from app.repositories.api_key_repository import (
    ApiKeyRepository,
    generate_api_key,
    hash_api_key,
)
from app.schemas.api_key import ApiKeyCreate
from tests.conftest import DEFAULT_COMPANY_ID


def _request(header):
    request = MagicMock()
    request.headers.get.return_value = header
    return request


class TestKeyHelpers:
    def test_generate_api_key_format(self):
        key = generate_api_key()
        assert key.startswith("ads_")
        assert len(key) == 4 + 64
        assert generate_api_key() != key

    def test_hash_api_key_deterministic(self):
        assert hash_api_key("ads_abc") == hash_api_key("ads_abc")
        assert hash_api_key("ads_abc") != hash_api_key("ads_abd")
        assert len(hash_api_key("ads_abc")) == 64


class TestBearerToken:
    def test_extracts_key(self):
        assert bearer_token("Bearer ads_123") == "ads_123"

    @pytest.mark.parametrize(
        ("header", "detail"),
        [
            (None, "Authorization header is required"),
            ("Basic abc123", "Invalid authorization header format"),
            ("Bearer ", "API key is required"),
        ],
    )
    def test_rejects(self, header, detail):
        with pytest.raises(HTTPException) as exc_info:
            bearer_token(header)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == detail
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}


class TestEnsureUsable:
    def test_naive_expiry_from_sqlite_is_compared_as_utc(self):
        now = datetime.now(UTC)
        api_key = ApiKey(status="active", expires_at=(now + timedelta(hours=1)).replace(tzinfo=None))
        assert ensure_usable(api_key, now) is api_key

    def test_missing_key(self):
        with pytest.raises(HTTPException) as exc_info:
            ensure_usable(None, datetime.now(UTC))
        assert exc_info.value.detail == "Invalid API key"


class TestApiKeyRepository:
    def test_create_api_key(self, db_session):
        api_key, raw_key = ApiKeyRepository(db_session).create(
            DEFAULT_COMPANY_ID, ApiKeyCreate(name="Deploy")
        )
        assert api_key.key_hash == hash_api_key(raw_key)
        assert api_key.key_prefix == raw_key[:12]
        assert api_key.status == "active"
        assert api_key.company_id == DEFAULT_COMPANY_ID

    def test_lookup_by_raw_key(self, db_session):
        repo = ApiKeyRepository(db_session)
        api_key, raw_key = repo.create(DEFAULT_COMPANY_ID, ApiKeyCreate())
        assert repo.get_by_raw_key(raw_key).id == api_key.id
        assert repo.get_by_raw_key(raw_key[4:]) is None

    def test_list_is_scoped_to_company(self, db_session):
        repo = ApiKeyRepository(db_session)
        repo.create(DEFAULT_COMPANY_ID, ApiKeyCreate(name="One"))
        repo.create(DEFAULT_COMPANY_ID, ApiKeyCreate(name="Two"))
        assert len(repo.get_all(DEFAULT_COMPANY_ID)) == 2
        assert repo.get_all(uuid4()) == []

    def test_revoke_other_company_key(self, db_session):
        repo = ApiKeyRepository(db_session)
        api_key, _ = repo.create(DEFAULT_COMPANY_ID, ApiKeyCreate())
        assert repo.revoke(api_key.id, uuid4()) is None
        assert repo.revoke(api_key.id, DEFAULT_COMPANY_ID).status == "revoked"


class TestGetCurrentCompany:
    def test_unknown_key(self, db_session):
        with pytest.raises(HTTPException) as exc_info:
            get_current_company(_request("Bearer ads_unknown"), db_session)
        assert exc_info.value.detail == "Invalid API key"

    def test_valid_key_updates_last_used(self, db_session, api_key):
        assert get_current_company(_request(f"Bearer {api_key}"), db_session) == DEFAULT_COMPANY_ID
        stored = db_session.query(ApiKey).one()
        assert stored.last_used_at is not None

    def test_revoked_key(self, db_session):
        repo = ApiKeyRepository(db_session)
        api_key, raw_key = repo.create(DEFAULT_COMPANY_ID, ApiKeyCreate())
        repo.revoke(api_key.id, DEFAULT_COMPANY_ID)
        with pytest.raises(HTTPException) as exc_info:
            get_current_company(_request(f"Bearer {raw_key}"), db_session)
        assert "revoked" in exc_info.value.detail

    def test_expired_key(self, db_session):
        _, raw_key = ApiKeyRepository(db_session).create(
            DEFAULT_COMPANY_ID,
            ApiKeyCreate(expires_at=datetime.now(UTC) - timedelta(days=1)),
        )
        with pytest.raises(HTTPException) as exc_info:
            get_current_company(_request(f"Bearer {raw_key}"), db_session)
        assert "expired" in exc_info.value.detail

    def test_future_expiry_is_accepted(self, db_session):
        _, raw_key = ApiKeyRepository(db_session).create(
            DEFAULT_COMPANY_ID,
            ApiKeyCreate(expires_at=datetime.now(UTC) + timedelta(days=30)),
        )
        assert get_current_company(_request(f"Bearer {raw_key}"), db_session) == DEFAULT_COMPANY_ID


class TestApiKeyEndpoints:
    def test_list_never_exposes_raw_keys(self, client):
        response = client.get("/v1/companies/current/api_keys")
        assert response.status_code == 200
        keys = response.json()
        assert len(keys) == 1
        assert "raw_key" not in keys[0]
        assert "key_hash" not in keys[0]
        assert keys[0]["key_prefix"].startswith("ads_")
