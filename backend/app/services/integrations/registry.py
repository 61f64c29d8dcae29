"""Adapter registry: resolves a provider identifier to its adapter.

Registration is explicit; an unknown provider fails with
``UnsupportedProviderError`` before any work is attempted.
"""

from collections.abc import Callable

import httpx

from app.models.integration import Integration, IntegrationProviderType
from app.services.integrations.base import IntegrationAdapter
from app.services.integrations.errors import UnsupportedProviderError
from app.services.integrations.hubspot import HubSpotAdapter
from app.services.integrations.kevel import KevelAdapter
from app.services.integrations.pipedrive import PipedriveAdapter
from app.services.integrations.salesforce import SalesforceAdapter
from app.services.integrations.vtex import VtexAdapter

AdapterFactory = Callable[..., IntegrationAdapter]


class AdapterRegistry:
    def __init__(self) -> None:
        self._factories: dict[str, AdapterFactory] = {}

    def register(self, provider: str, factory: AdapterFactory) -> None:
        self._factories[str(provider)] = factory

    def providers(self) -> list[str]:
        return sorted(self._factories)

    def is_registered(self, provider: str) -> bool:
        return str(provider) in self._factories

    def resolve(
        self, provider: str, transport: httpx.BaseTransport | None = None
    ) -> IntegrationAdapter:
        factory = self._factories.get(str(provider))
        if factory is None:
            raise UnsupportedProviderError(str(provider))
        return factory(transport=transport)


adapter_registry = AdapterRegistry()
adapter_registry.register(IntegrationProviderType.SALESFORCE.value, SalesforceAdapter)
adapter_registry.register(IntegrationProviderType.HUBSPOT.value, HubSpotAdapter)
adapter_registry.register(IntegrationProviderType.PIPEDRIVE.value, PipedriveAdapter)
adapter_registry.register(IntegrationProviderType.VTEX.value, VtexAdapter)
adapter_registry.register(IntegrationProviderType.KEVEL.value, KevelAdapter)


def get_integration_adapter(
    integration: Integration, transport: httpx.BaseTransport | None = None
) -> IntegrationAdapter:
    """Return the adapter for *integration*'s provider."""
    return adapter_registry.resolve(str(integration.provider_type), transport=transport)
