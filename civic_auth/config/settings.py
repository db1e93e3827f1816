from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase (managed auth + account store)
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for admin auth operations and the accounts table
    accounts_table: str = "profiles"

    # Legacy Supabase project, only read by the user migration script
    legacy_supabase_url: Optional[str] = None
    legacy_supabase_service_role_key: Optional[str] = None

    # Fayda national ID system
    fayda_api_url: str = ""
    fayda_timeout_seconds: float = 10.0

    # Auth policy
    auth_base_path: str = "/api/auth"
    public_base_url: str = "http://localhost:4000"
    phone_country_code: str = "251"
    max_failed_login_attempts: int = 5
    lockout_minutes: int = 15
    min_password_length: int = 8
    max_password_length: int = 128

    # App
    app_name: str = "civic-auth-backend"
    version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 4000
    trusted_origins: str = ""
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    login_rate_limit: str = "10/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_trusted_origins(self) -> List[str]:
        origins = [o.strip() for o in self.trusted_origins.split(",") if o.strip()]
        return origins or [self.public_base_url, "http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
