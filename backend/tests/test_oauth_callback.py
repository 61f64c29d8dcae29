"""Tests for completing OAuth authorization with an authorization code."""

from unittest.mock import patch
from urllib.parse import parse_qs

import httpx
import pytest

from app.core.config import settings
from app.services.integrations.credentials import CredentialResolver
from app.services.integrations.errors import (
    AuthenticationError,
    MissingCredentialsError,
    UnsupportedCapabilityError,
)
from tests.conftest import SALESFORCE_INSTANCE, create_integration

TOKEN_PATH = "/services/oauth2/token"
REDIRECT_URI = "https://app.example.com/oauth/salesforce"


def token_endpoint(fake_provider, body=None, status=200):
    fake_provider.on(
        "POST",
        TOKEN_PATH,
        body
        if body is not None
        else {
            "access_token": "sf_access",
            "refresh_token": "sf_new_refresh",
            "instance_url": SALESFORCE_INSTANCE,
        },
        status=status,
    )
    return fake_provider


@pytest.fixture
def resolver(fake_provider):
    return CredentialResolver(transport=fake_provider.transport)


class TestExchangeAuthorizationCode:
    def test_stores_refresh_token_and_instance_url(
        self, salesforce_integration, fake_provider, resolver
    ):
        token_endpoint(fake_provider)

        credentials = resolver.exchange_authorization_code(
            salesforce_integration, "auth-code-1", REDIRECT_URI
        )

        assert credentials == {
            "client_id": "sf_client",
            "client_secret": "sf_secret",
            "refresh_token": "sf_new_refresh",
            "instance_url": SALESFORCE_INSTANCE,
        }
        (request,) = fake_provider.calls("POST", TOKEN_PATH)
        form = {key: values[0] for key, values in parse_qs(request.content.decode()).items()}
        assert form == {
            "grant_type": "authorization_code",
            "client_id": "sf_client",
            "client_secret": "sf_secret",
            "redirect_uri": REDIRECT_URI,
            "code": "auth-code-1",
        }

    def test_rejected_code(self, salesforce_integration, fake_provider, resolver):
        token_endpoint(
            fake_provider,
            {"error": "invalid_grant", "error_description": "expired authorization code"},
            status=400,
        )
        with pytest.raises(AuthenticationError) as exc_info:
            resolver.exchange_authorization_code(salesforce_integration, "stale", REDIRECT_URI)
        assert "invalid_grant" in exc_info.value.body

    def test_response_without_refresh_token(
        self, salesforce_integration, fake_provider, resolver
    ):
        token_endpoint(fake_provider, {"access_token": "sf_access"})
        with pytest.raises(AuthenticationError):
            resolver.exchange_authorization_code(salesforce_integration, "code", REDIRECT_URI)

    def test_missing_client_credentials(self, db_session, fake_provider, resolver, monkeypatch):
        monkeypatch.setattr(settings, "salesforce_client_id", "")
        monkeypatch.setattr(settings, "salesforce_client_secret", "")
        integration = create_integration(db_session, "salesforce")
        with pytest.raises(MissingCredentialsError):
            resolver.exchange_authorization_code(integration, "code", REDIRECT_URI)
        assert fake_provider.requests == []

    def test_static_key_provider(self, kevel_integration, fake_provider, resolver):
        with pytest.raises(UnsupportedCapabilityError):
            resolver.exchange_authorization_code(kevel_integration, "code", REDIRECT_URI)
        assert fake_provider.requests == []


class TestOAuthCallbackEndpoint:
    def _post(self, client, integration_id, fake_provider, code="auth-code-1"):
        with patch(
            "app.routers.integrations.CredentialResolver",
            lambda: CredentialResolver(transport=fake_provider.transport),
        ):
            return client.post(
                f"/v1/integrations/{integration_id}/oauth/callback",
                json={"code": code, "redirect_uri": REDIRECT_URI},
            )

    def test_callback_then_sync_uses_new_token(
        self, client, db_session, salesforce_integration, fake_provider
    ):
        token_endpoint(fake_provider)

        response = self._post(client, salesforce_integration.id, fake_provider)

        assert response.status_code == 200
        assert response.json()["id"] == str(salesforce_integration.id)
        assert "credentials" not in response.json()
        db_session.refresh(salesforce_integration)
        assert salesforce_integration.credentials["refresh_token"] == "sf_new_refresh"
        assert salesforce_integration.credentials["instance_url"] == SALESFORCE_INSTANCE

        refreshed = CredentialResolver(transport=fake_provider.transport).resolve(
            salesforce_integration
        )
        assert refreshed.instance_url == SALESFORCE_INSTANCE
        last_form = parse_qs(fake_provider.calls("POST", TOKEN_PATH)[-1].content.decode())
        assert last_form["refresh_token"] == ["sf_new_refresh"]

    def test_rejected_code_keeps_credentials(
        self, client, db_session, salesforce_integration, fake_provider
    ):
        token_endpoint(fake_provider, {"error": "invalid_grant"}, status=400)

        response = self._post(client, salesforce_integration.id, fake_provider, code="stale")

        assert response.status_code == 502
        assert response.json()["error"] == "authentication_failed"
        db_session.refresh(salesforce_integration)
        assert salesforce_integration.credentials["refresh_token"] == "sf_refresh"

    def test_blank_code_is_rejected(self, client, salesforce_integration):
        response = client.post(
            f"/v1/integrations/{salesforce_integration.id}/oauth/callback",
            json={"code": "", "redirect_uri": REDIRECT_URI},
        )
        assert response.status_code == 422

    def test_unknown_integration(self, client, fake_provider):
        response = client.post(
            "/v1/integrations/00000000-0000-0000-0000-00000000dead/oauth/callback",
            json={"code": "c", "redirect_uri": REDIRECT_URI},
        )
        assert response.status_code == 404


def test_token_endpoint_receives_form_encoding(salesforce_integration, fake_provider):
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["content-type"])
        return httpx.Response(200, json={"refresh_token": "r2"})

    fake_provider.on("POST", TOKEN_PATH, handler=handler)
    CredentialResolver(transport=fake_provider.transport).exchange_authorization_code(
        salesforce_integration, "code", REDIRECT_URI
    )
    assert seen == ["application/x-www-form-urlencoded"]
