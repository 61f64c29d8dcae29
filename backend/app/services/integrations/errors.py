"""Error taxonomy of the integration engine.

Every error carries a short machine ``code`` and the HTTP status the API
reports it with.
"""


class IntegrationError(Exception):
    code = "integration_error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnsupportedProviderError(IntegrationError):
    code = "unsupported_provider"
    status_code = 422

    def __init__(self, provider: str) -> None:
        super().__init__(f"Unsupported integration provider: {provider}")
        self.provider = provider


class UnsupportedCapabilityError(IntegrationError):
    code = "unsupported_capability"
    status_code = 422

    def __init__(self, provider: str, capability: str) -> None:
        super().__init__(f"Provider {provider} does not support {capability}")
        self.provider = provider
        self.capability = capability


class AuthenticationError(IntegrationError):
    """The provider rejected the credential exchange."""

    code = "authentication_failed"
    status_code = 502

    def __init__(self, provider: str, body: str) -> None:
        super().__init__(f"Failed to authenticate with {provider}: {body}")
        self.provider = provider
        self.body = body


class MissingCredentialsError(IntegrationError):
    code = "missing_credentials"
    status_code = 400

    def __init__(self, provider: str, missing: list[str]) -> None:
        super().__init__(f"Missing {provider} credentials: {', '.join(missing)}")
        self.provider = provider
        self.missing = missing


class ExternalApiError(IntegrationError):
    """A provider call failed: a non-2xx answer, or no answer at all (``status`` is None)."""

    code = "external_api_error"
    status_code = 502

    def __init__(self, provider: str, status: int | None, body: str) -> None:
        if status is None:
            message = f"{provider} request failed: {body}"
        else:
            message = f"{provider} API error {status}: {body}"
        super().__init__(message)
        self.provider = provider
        self.status = status
        self.body = body


class RecordProcessingError(IntegrationError):
    code = "record_processing_error"
    status_code = 422


class NotFoundError(IntegrationError):
    code = "not_found"
    status_code = 404

    def __init__(self, resource: str, resource_id: object) -> None:
        super().__init__(f"{resource} {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id


class NotPushedError(IntegrationError):
    code = "not_pushed"
    status_code = 409

    def __init__(self, campaign_id: object) -> None:
        super().__init__(f"Campaign {campaign_id} has not been pushed to this integration yet")
        self.campaign_id = campaign_id


class InvalidJobSpecError(IntegrationError):
    code = "invalid_job_spec"
    status_code = 422


class SyncInProgressError(IntegrationError):
    code = "sync_in_progress"
    status_code = 409

    def __init__(self, integration_id: object) -> None:
        super().__init__(f"A sync of integration {integration_id} is already running")
        self.integration_id = integration_id
