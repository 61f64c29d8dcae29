from app.models.ad_space import AdSpace
from app.models.advertiser import Advertiser
from app.models.api_key import ApiKey
from app.models.audit_log import AuditLog
from app.models.campaign import Campaign, CampaignStatus
from app.models.campaign_ad_space import CampaignAdSpace
from app.models.company import Company
from app.models.contact import Contact
from app.models.integration import (
    Integration,
    IntegrationProviderType,
    IntegrationStatus,
    IntegrationType,
)
from app.models.integration_mapping import IntegrationMapping, MappableType
from app.models.integration_sync_history import IntegrationSyncHistory, SyncStatus, SyncType
from app.models.opportunity import Opportunity, PipelineStage
from app.models.sync_lease import SyncLease

__all__ = [
    "AdSpace",
    "Advertiser",
    "ApiKey",
    "AuditLog",
    "Campaign",
    "CampaignAdSpace",
    "CampaignStatus",
    "Company",
    "Contact",
    "Integration",
    "IntegrationMapping",
    "IntegrationProviderType",
    "IntegrationStatus",
    "IntegrationSyncHistory",
    "IntegrationType",
    "MappableType",
    "Opportunity",
    "PipelineStage",
    "SyncLease",
    "SyncStatus",
    "SyncType",
]
