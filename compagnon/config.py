"""All settings, loaded from the .env file."""
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_url: str = "http://localhost:8000"
    secret_key: str = "change-me"
    database_url: str = "sqlite:///./compagnon.db"
    log_level: str = "INFO"

    # BOAMP open-data feed
    boamp_api_url: str = (
        "https://boamp-datadila.opendatasoft.com"
        "/api/explore/v2.1/catalog/datasets/boamp/records"
    )
    boamp_page_size: int = 20
    boamp_timeout: float = 20.0
    boamp_max_retries: int = 2

    # Tender cache (0 = unbounded)
    tender_cache_max_entries: int = 500
    tender_cache_seed_samples: bool = True

    # Accounts
    trial_duration_hours: int = 24
    demo_user_id: str = "demo-user"

    # Notifications
    notification_window_days: int = 5

    # Rate limiting
    redis_url: str = ""
    rate_limit_enabled: bool = True
    rate_limit_default: str = "120/minute"

    class Config:
        env_file = ".env"


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    return settings
