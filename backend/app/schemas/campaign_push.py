from pydantic import BaseModel


class CampaignPushResponse(BaseModel):
    success: bool
    external_campaign_id: str
    sub_units_created: int
    created: bool
    errors: list[str]
    message: str


class CampaignToggleRequest(BaseModel):
    activate: bool


class CampaignToggleResponse(BaseModel):
    success: bool
    status: str
    sub_unit_errors: list[str]
