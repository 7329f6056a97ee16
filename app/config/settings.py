from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""  # public anon key, used by the identity client
    supabase_service_role_key: Optional[str] = None  # Server-side table access; bypasses RLS
    users_table: str = "users"

    # Identity client
    api_base_url: str = "http://localhost:8000"  # Where the sync endpoint is served
    site_url: str = "http://localhost:3000"  # Base for the email confirmation redirect
    password_min_length: int = 6
    sync_timeout_seconds: float = 10.0

    # App
    app_name: str = "empleo-social-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    rate_limit_enabled: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def auth_callback_url(self) -> str:
        return f"{self.site_url.rstrip('/')}/auth/callback"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
