from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database backing the document store and the identity provider.
    # Leave empty to run without a store: every write/subscribe then fails fast.
    # Example: sqlite:///./timesheets.db
    database_url: str = ""

    # IANA timezone used for "today" / "this week" boundaries
    timezone: str = "UTC"

    # Analytics window (days, inclusive of today)
    default_window_days: int = 7
    max_window_days: int = 365

    # Application
    app_env: str = "development"
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_retention_days: int = 30
    # Comma-separated list of allowed origins, "*" for any
    cors_origins: str = "*"

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def is_store_configured(self) -> bool:
        return bool(self.database_url.strip())

    @property
    def cors_origin_list(self):
        return [o.strip() for o in self.cors_origins.split(',') if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
