"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Persistent cache store
    database_url: str = "sqlite:///./route_ledger.db"

    # Remote data source
    portfolio_api_base: str = "http://localhost:8001"
    http_timeout_seconds: float = 10.0

    # Service
    service_name: str = "route-ledger"
    log_level: str = "INFO"

    # Dashboard cache (single slot, 30 minutes)
    dashboard_cache_key: str = "@dashboard_data"
    dashboard_cache_ttl_ms: int = 1_800_000
    # Per-user refreshers kept by the API process
    dashboard_refresher_pool_size: int = 256

    # Callers wait this long after the last keystroke before filtering
    search_debounce_ms: int = 600

    # Dashboard alerts
    top_debtors_limit: int = 5
    long_overdue_days: int = 30


settings = Settings()
