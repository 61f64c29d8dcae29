from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "adsync"
    version: str = "0.1.0"
    DEBUG: bool = False
    APP_DOMAIN: str = "example.com"
    APP_DATABASE_DSN: str = "sqlite:////tmp/adsync.db"
    REDIS_URL: str = "redis://localhost:6379"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Provider endpoints
    SALESFORCE_TOKEN_URL: str = "https://login.salesforce.com/services/oauth2/token"
    SALESFORCE_API_VERSION: str = "v58.0"
    HUBSPOT_TOKEN_URL: str = "https://api.hubapi.com/oauth/v1/token"
    HUBSPOT_API_BASE: str = "https://api.hubapi.com"
    PIPEDRIVE_TOKEN_URL: str = "https://oauth.pipedrive.com/oauth/token"
    VTEX_TOKEN_URL: str = "https://vtexid.vtex.com.br/api/vtexid/oauth/token"
    KEVEL_API_BASE: str = "https://api.kevel.co/v1"

    # Fallback OAuth client credentials, used when an integration's own
    # credential blob does not carry them
    salesforce_client_id: str = ""
    salesforce_client_secret: str = ""
    salesforce_refresh_token: str = ""
    hubspot_client_id: str = ""
    hubspot_client_secret: str = ""
    hubspot_refresh_token: str = ""

    # None means provider calls never time out
    PROVIDER_HTTP_TIMEOUT_SECONDS: float | None = None

    # Campaign push
    CAMPAIGN_PUSH_MAX_SUB_UNITS: int = 3

    # Sync runs
    SYNC_LEASE_TTL_SECONDS: int = 900
    AUTO_SYNC_PROVIDERS: str = "kevel"

    # Cascade deletion
    CASCADE_LEGACY_PROVENANCE_HEURISTIC: bool = False

    @property
    def auto_sync_providers(self) -> list[str]:
        return [p.strip() for p in self.AUTO_SYNC_PROVIDERS.split(",") if p.strip()]


settings = Settings()
