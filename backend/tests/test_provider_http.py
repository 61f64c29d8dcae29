"""Tests for the httpx wrapper provider adapters share."""

import httpx
import pytest

from app.core.config import settings
from app.services.integrations.errors import ExternalApiError
from app.services.integrations.http import MAX_ERROR_BODY, ProviderHttpClient


def _client(handler, **kwargs):
    return ProviderHttpClient("kevel", transport=httpx.MockTransport(handler), **kwargs)


class TestProviderHttpClient:
    def test_json_answer(self):
        def handler(request):
            assert request.url == "https://api.kevel.co/v1/site"
            assert request.headers["X-Adzerk-ApiKey"] == "k"
            return httpx.Response(200, json={"items": [{"Id": 1}]})

        with _client(
            handler, base_url="https://api.kevel.co/v1", headers={"X-Adzerk-ApiKey": "k"}
        ) as client:
            assert client.get("/site") == {"items": [{"Id": 1}]}

    def test_empty_body_is_empty_dict(self):
        with _client(lambda request: httpx.Response(204)) as client:
            assert client.put("https://api.kevel.co/v1/flight/1", json={"IsActive": True}) == {}

    def test_error_status(self):
        with _client(lambda request: httpx.Response(429, text="x" * 5000)) as client:
            with pytest.raises(ExternalApiError) as exc_info:
                client.post("https://api.kevel.co/v1/campaign", json={})

        error = exc_info.value
        assert error.status == 429
        assert error.provider == "kevel"
        assert len(error.body) == MAX_ERROR_BODY
        assert error.code == "external_api_error"

    def test_transport_failure_has_no_status(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with _client(handler) as client:
            with pytest.raises(ExternalApiError) as exc_info:
                client.get("https://api.kevel.co/v1/site")

        assert exc_info.value.status is None
        assert "connection refused" in exc_info.value.message

    def test_non_json_body(self):
        with _client(lambda request: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(ExternalApiError, match="not JSON"):
                client.get("https://api.kevel.co/v1/site")

    def test_timeout_comes_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "PROVIDER_HTTP_TIMEOUT_SECONDS", 7.5)
        with _client(lambda request: httpx.Response(200, json={})) as client:
            assert client._client.timeout.read == 7.5

    def test_no_timeout_by_default(self):
        with _client(lambda request: httpx.Response(200, json={})) as client:
            assert client._client.timeout.read is None
