"""Thin httpx wrapper shared by provider adapters."""

import logging
from typing import Any

import httpx

from app.core.config import settings
from app.services.integrations.errors import ExternalApiError

logger = logging.getLogger(__name__)

MAX_ERROR_BODY = 1000


class ProviderHttpClient:
    """Synchronous JSON client for one provider.

    Non-2xx answers and transport failures both raise ``ExternalApiError``.
    No retries are made. The timeout comes from
    ``PROVIDER_HTTP_TIMEOUT_SECONDS``; None waits indefinitely.
    """

    def __init__(
        self,
        provider: str,
        base_url: str = "",
        headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.provider = provider
        self._client = httpx.Client(
            base_url=base_url,
            headers=headers,
            transport=transport,
            timeout=settings.PROVIDER_HTTP_TIMEOUT_SECONDS,
        )

    def __enter__(self) -> "ProviderHttpClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
    ) -> Any:
        try:
            resp = self._client.request(method, url, params=params, json=json, data=data)
        except httpx.HTTPError as exc:
            logger.warning("%s %s %s failed: %s", self.provider, method, url, exc)
            raise ExternalApiError(self.provider, None, str(exc)[:MAX_ERROR_BODY]) from exc

        if not resp.is_success:
            body = resp.text[:MAX_ERROR_BODY] if resp.text else ""
            logger.warning("%s %s %s returned %d", self.provider, method, url, resp.status_code)
            raise ExternalApiError(self.provider, resp.status_code, body)

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as exc:
            raise ExternalApiError(
                self.provider, resp.status_code, "Response body is not JSON"
            ) from exc

    def get(self, url: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", url, params=params)

    def post(self, url: str, json: Any = None, data: dict[str, Any] | None = None) -> Any:
        return self.request("POST", url, json=json, data=data)

    def put(self, url: str, json: Any = None) -> Any:
        return self.request("PUT", url, json=json)
