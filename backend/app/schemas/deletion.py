from pydantic import BaseModel


class DeletedCounts(BaseModel):
    mappings: int = 0
    history: int = 0
    campaigns: int = 0
    ad_spaces: int = 0
    integration: int = 0


class IntegrationDeleteResponse(BaseModel):
    success: bool
    deleted_counts: DeletedCounts
