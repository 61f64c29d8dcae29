"""Async job tracker for long-running provider computations (forecasts).

The tracker is a stateless proxy: it validates the job spec, submits it,
and translates provider job states into ``queued | running | finished |
error``. Nothing about the job is stored locally; callers keep the job id
and poll at whatever cadence they choose.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import httpx

from app.models.integration import Integration
from app.services.integrations.base import IntegrationAdapter
from app.services.integrations.credentials import ProviderCredentials
from app.services.integrations.errors import (
    InvalidJobSpecError,
    MissingCredentialsError,
    UnsupportedCapabilityError,
)
from app.services.integrations.registry import AdapterRegistry, adapter_registry

logger = logging.getLogger(__name__)

JOB_KINDS = ("existing", "available", "deliverable")
DEFAULT_SAMPLING = 2
DEFAULT_PRIORITY = 50

# Provider job states -> tracker states; anything else is an error
JOB_STATUSES = {
    "enqueued": "queued",
    "queued": "queued",
    "running": "running",
    "finished": "finished",
    "error": "error",
}


@dataclass
class ForecastJobSpec:
    kind: str
    end_date: date | None = None
    start_date: date | None = None
    priority: int | None = None
    targeting: dict[str, Any] | None = None
    sampling: int | None = None

    def validate(self) -> None:
        if self.kind not in JOB_KINDS:
            raise InvalidJobSpecError(
                f"Unsupported forecast kind {self.kind!r}; expected one of {', '.join(JOB_KINDS)}"
            )
        if self.end_date is None:
            raise InvalidJobSpecError(f"A {self.kind} forecast requires end_date")
        if self.start_date is not None and self.start_date > self.end_date:
            raise InvalidJobSpecError("start_date must not be after end_date")
        if self.kind == "existing" and (self.priority is not None or self.targeting):
            raise InvalidJobSpecError("An existing forecast takes no priority or targeting")
        if self.kind != "deliverable" and self.targeting:
            raise InvalidJobSpecError("Only deliverable forecasts accept targeting")

    def to_payload(self, today: date | None = None) -> dict[str, Any]:
        """Build the forecaster request body. Call ``validate`` first."""
        if self.end_date is None:
            raise InvalidJobSpecError(f"A {self.kind} forecast requires end_date")
        today = today or date.today()
        payload: dict[str, Any] = {
            "Type": self.kind,
            "EndDate": self.end_date.isoformat(),
            "Params": {"Sampling": self.sampling or DEFAULT_SAMPLING},
        }
        if self.kind in ("available", "deliverable"):
            payload["StartDate"] = (self.start_date or today).isoformat()
            payload["TimeZone"] = "UTC"
        if self.kind == "available":
            payload["Priority"] = self.priority or DEFAULT_PRIORITY
        if self.kind == "deliverable" and self.targeting:
            payload["Targeting"] = self.targeting
        return payload


@dataclass
class AsyncJob:
    job_id: str
    status: str
    progress: float | None = None
    result: dict[str, Any] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "status": self.status,
            "progress": self.progress,
            "result": self.result,
        }


def normalize_status(provider_status: str) -> str:
    return JOB_STATUSES.get(provider_status.strip().lower(), "error")


class AsyncJobTracker:
    def __init__(
        self,
        registry: AdapterRegistry | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.registry = registry or adapter_registry
        self.transport = transport

    def start(self, integration: Integration, spec: ForecastJobSpec) -> AsyncJob:
        """Submit a forecast. A forecast that finishes immediately comes back with its result."""
        spec.validate()
        adapter = self._adapter(integration)
        configuration: dict[str, Any] = integration.configuration or {}  # type: ignore[assignment]
        if not (configuration.get("network_id") or configuration.get("networkId")):
            raise MissingCredentialsError(str(integration.provider_type), ["network_id"])
        credentials = self._credentials(adapter, integration)

        external = adapter.start_forecast(credentials, spec.to_payload())
        status = normalize_status(external.status)
        job = AsyncJob(
            job_id=external.job_id,
            status=status,
            progress=external.progress,
            result=external.result if status == "finished" else None,
        )
        logger.info(
            "Started %s forecast %s for integration %s: %s",
            spec.kind,
            job.job_id,
            integration.id,
            job.status,
        )
        return job

    def poll(self, integration: Integration, job_id: str) -> AsyncJob:
        adapter = self._adapter(integration)
        credentials = self._credentials(adapter, integration)

        external = adapter.get_forecast(credentials, job_id)
        status = normalize_status(external.status)
        return AsyncJob(
            job_id=external.job_id or job_id,
            status=status,
            progress=external.progress,
            result=external.result if status in ("finished", "error") else None,
        )

    def _adapter(self, integration: Integration) -> IntegrationAdapter:
        provider = str(integration.provider_type)
        adapter = self.registry.resolve(provider, transport=self.transport)
        if not adapter.supports_forecasting:
            raise UnsupportedCapabilityError(provider, "forecasting")
        return adapter

    def _credentials(
        self, adapter: IntegrationAdapter, integration: Integration
    ) -> ProviderCredentials:
        credentials = adapter.authenticate(integration)
        if credentials is None:
            raise MissingCredentialsError(str(integration.provider_type), ["api_key"])
        return credentials
