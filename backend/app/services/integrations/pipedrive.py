"""Pipedrive adapter.

Registered so Pipedrive integrations can be created and synced, but deal,
person and organization sync are not built yet: every capability returns
the zero-result stub.
"""

from app.models.integration import Integration, IntegrationProviderType, IntegrationType
from app.services.integrations.base import IntegrationAdapter
from app.services.integrations.credentials import ProviderCredentials


class PipedriveAdapter(IntegrationAdapter):
    provider = IntegrationProviderType.PIPEDRIVE.value
    integration_type = IntegrationType.CRM

    def authenticate(self, integration: Integration) -> ProviderCredentials | None:
        return None
