from app.services.integrations.async_jobs import AsyncJobTracker, ForecastJobSpec
from app.services.integrations.base import EntityResult, IntegrationAdapter, SyncContext
from app.services.integrations.campaign_push import CampaignPushCoordinator
from app.services.integrations.deletion import IntegrationDeletionService
from app.services.integrations.orchestrator import SyncOrchestrator
from app.services.integrations.registry import (
    AdapterRegistry,
    adapter_registry,
    get_integration_adapter,
)
from app.services.integrations.scheduler import AutoSyncScheduler

__all__ = [
    "AdapterRegistry",
    "AsyncJobTracker",
    "AutoSyncScheduler",
    "CampaignPushCoordinator",
    "EntityResult",
    "ForecastJobSpec",
    "IntegrationAdapter",
    "IntegrationDeletionService",
    "SyncContext",
    "SyncOrchestrator",
    "adapter_registry",
    "get_integration_adapter",
]
