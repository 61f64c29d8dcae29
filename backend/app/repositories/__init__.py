from app.repositories.ad_space_repository import AdSpaceRepository
from app.repositories.advertiser_repository import AdvertiserRepository
from app.repositories.api_key_repository import ApiKeyRepository
from app.repositories.audit_log_repository import AuditLogRepository
from app.repositories.campaign_ad_space_repository import CampaignAdSpaceRepository
from app.repositories.campaign_repository import CampaignRepository
from app.repositories.company_repository import CompanyRepository
from app.repositories.contact_repository import ContactRepository
from app.repositories.integration_mapping_repository import IntegrationMappingRepository
from app.repositories.integration_repository import IntegrationRepository
from app.repositories.integration_sync_history_repository import (
    IntegrationSyncHistoryRepository,
)
from app.repositories.opportunity_repository import OpportunityRepository
from app.repositories.sync_lease_repository import SyncLeaseRepository

__all__ = [
    "AdSpaceRepository",
    "AdvertiserRepository",
    "ApiKeyRepository",
    "AuditLogRepository",
    "CampaignAdSpaceRepository",
    "CampaignRepository",
    "CompanyRepository",
    "ContactRepository",
    "IntegrationMappingRepository",
    "IntegrationRepository",
    "IntegrationSyncHistoryRepository",
    "OpportunityRepository",
    "SyncLeaseRepository",
]
