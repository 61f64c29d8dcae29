"""Credential resolution for provider APIs.

OAuth providers exchange a stored refresh token for a short-lived access
token on every resolve. Nothing is cached: each sync run, push or forecast
call resolves afresh, so a revoked or rotated token is noticed immediately.
Static-key providers read the key straight off the integration.
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from app.core.config import settings
from app.models.integration import Integration, IntegrationProviderType
from app.services.integrations.errors import (
    AuthenticationError,
    ExternalApiError,
    MissingCredentialsError,
    UnsupportedCapabilityError,
)
from app.services.integrations.http import ProviderHttpClient

logger = logging.getLogger(__name__)


@dataclass
class ProviderCredentials:
    """Credentials usable for one run against one provider."""

    provider: str
    access_token: str | None = None
    api_key: str | None = None
    instance_url: str | None = None
    token_type: str = "Bearer"

    def auth_headers(self) -> dict[str, str]:
        if self.access_token:
            return {"Authorization": f"{self.token_type} {self.access_token}"}
        return {}


@dataclass(frozen=True)
class OAuthClientConfig:
    token_url: str
    client_id: str = ""
    client_secret: str = ""
    refresh_token: str = ""


def _oauth_defaults(provider: str) -> OAuthClientConfig | None:
    """Token endpoint plus fallback client secrets from settings."""
    if provider == IntegrationProviderType.SALESFORCE.value:
        return OAuthClientConfig(
            token_url=settings.SALESFORCE_TOKEN_URL,
            client_id=settings.salesforce_client_id,
            client_secret=settings.salesforce_client_secret,
            refresh_token=settings.salesforce_refresh_token,
        )
    if provider == IntegrationProviderType.HUBSPOT.value:
        return OAuthClientConfig(
            token_url=settings.HUBSPOT_TOKEN_URL,
            client_id=settings.hubspot_client_id,
            client_secret=settings.hubspot_client_secret,
            refresh_token=settings.hubspot_refresh_token,
        )
    if provider == IntegrationProviderType.PIPEDRIVE.value:
        return OAuthClientConfig(token_url=settings.PIPEDRIVE_TOKEN_URL)
    if provider == IntegrationProviderType.VTEX.value:
        return OAuthClientConfig(token_url=settings.VTEX_TOKEN_URL)
    return None


class CredentialResolver:
    """Resolves credentials for an integration."""

    def __init__(self, transport: httpx.BaseTransport | None = None) -> None:
        self.transport = transport

    def resolve(self, integration: Integration) -> ProviderCredentials:
        provider = str(integration.provider_type)
        oauth = _oauth_defaults(provider)
        if oauth is None:
            return self.resolve_static_key(integration)
        return self.exchange_refresh_token(integration, oauth)

    def resolve_static_key(self, integration: Integration) -> ProviderCredentials:
        provider = str(integration.provider_type)
        credentials: dict[str, Any] = integration.credentials or {}  # type: ignore[assignment]
        configuration: dict[str, Any] = integration.configuration or {}  # type: ignore[assignment]
        api_key = credentials.get("api_key") or configuration.get("api_key")
        if not api_key:
            raise MissingCredentialsError(provider, ["api_key"])
        return ProviderCredentials(provider=provider, api_key=str(api_key))

    def exchange_refresh_token(
        self, integration: Integration, oauth: OAuthClientConfig
    ) -> ProviderCredentials:
        provider = str(integration.provider_type)
        credentials: dict[str, Any] = integration.credentials or {}  # type: ignore[assignment]
        form = {
            "grant_type": "refresh_token",
            "client_id": credentials.get("client_id") or oauth.client_id,
            "client_secret": credentials.get("client_secret") or oauth.client_secret,
            "refresh_token": credentials.get("refresh_token") or oauth.refresh_token,
        }
        missing = [key for key in ("client_id", "client_secret", "refresh_token") if not form[key]]
        if missing:
            raise MissingCredentialsError(provider, missing)

        with ProviderHttpClient(provider, transport=self.transport) as client:
            try:
                token_data = client.post(oauth.token_url, data=form)
            except ExternalApiError as exc:
                logger.warning("Token refresh for %s integration %s failed", provider, integration.id)
                raise AuthenticationError(provider, exc.body) from exc

        access_token = token_data.get("access_token")
        if not access_token:
            raise AuthenticationError(provider, "Token response carried no access_token")

        logger.info("Authenticated with %s for integration %s", provider, integration.id)
        return ProviderCredentials(
            provider=provider,
            access_token=str(access_token),
            instance_url=token_data.get("instance_url") or credentials.get("instance_url"),
            token_type=str(token_data.get("token_type") or "Bearer"),
        )

    def exchange_authorization_code(
        self, integration: Integration, code: str, redirect_uri: str
    ) -> dict[str, Any]:
        """Finish an OAuth consent: trade ``code`` for a refresh token.

        Returns the integration's credential blob with ``refresh_token`` and
        ``instance_url`` filled in. The access token of the exchange is not
        kept; every later resolve refreshes anew.
        """
        provider = str(integration.provider_type)
        oauth = _oauth_defaults(provider)
        if oauth is None:
            raise UnsupportedCapabilityError(provider, "OAuth authorization")
        credentials: dict[str, Any] = dict(integration.credentials or {})
        form = {
            "grant_type": "authorization_code",
            "client_id": credentials.get("client_id") or oauth.client_id,
            "client_secret": credentials.get("client_secret") or oauth.client_secret,
            "redirect_uri": redirect_uri,
            "code": code,
        }
        missing = [key for key in ("client_id", "client_secret") if not form[key]]
        if missing:
            raise MissingCredentialsError(provider, missing)

        with ProviderHttpClient(provider, transport=self.transport) as client:
            try:
                token_data = client.post(oauth.token_url, data=form)
            except ExternalApiError as exc:
                logger.warning(
                    "Authorization code exchange for %s integration %s failed",
                    provider,
                    integration.id,
                )
                raise AuthenticationError(provider, exc.body) from exc

        refresh_token = token_data.get("refresh_token")
        if not refresh_token:
            raise AuthenticationError(provider, "Token response carried no refresh_token")

        credentials["refresh_token"] = str(refresh_token)
        if token_data.get("instance_url"):
            credentials["instance_url"] = str(token_data["instance_url"])
        logger.info("Authorized %s integration %s", provider, integration.id)
        return credentials
