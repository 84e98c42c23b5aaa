from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

class Settings(BaseSettings):
    # App
    APP_NAME: str = "CRM Tool Gateway"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # CORS (comma separated)
    ALLOWED_ORIGINS: str = "*"

    # Session tokens
    JWT_SECRET_KEY: str = "change_me_in_production_please_super_secret"
    JWT_ALGORITHM: str = "HS256"
    SESSION_TOKEN_TTL_HOURS: int = 24

    # Downstream CRM service
    CRM_API_BASE_URL: str = "https://services.leadconnectorhq.com"
    MCP_BASE_URL: str = "https://services.leadconnectorhq.com/mcp/"
    CRM_API_KEY: str = ""
    PROXY_TIMEOUT_SECONDS: float = 30.0
    CREDENTIAL_CHECK_TIMEOUT_SECONDS: float = 10.0
    MCP_PROBE_TIMEOUT_SECONDS: float = 10.0
    HEALTH_PROBE_TIMEOUT_SECONDS: float = 15.0

    # Rate limiting
    RATE_LIMIT_MAX_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_MS: int = 60000

    # Tool catalog
    TOOLS_CONFIG_PATH: str = ""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def allowed_origins(self) -> list[str]:
        origins = [item.strip() for item in self.ALLOWED_ORIGINS.split(",") if item.strip()]
        return origins or ["*"]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

@lru_cache()
def get_settings() -> Settings:
    return Settings()
