"""VTEX adapter. Orders, customers and sellers are not synced yet; capabilities are stubs."""

from app.models.integration import Integration, IntegrationProviderType, IntegrationType
from app.services.integrations.base import IntegrationAdapter
from app.services.integrations.credentials import ProviderCredentials


class VtexAdapter(IntegrationAdapter):
    provider = IntegrationProviderType.VTEX.value
    integration_type = IntegrationType.CRM

    def authenticate(self, integration: Integration) -> ProviderCredentials | None:
        return None
