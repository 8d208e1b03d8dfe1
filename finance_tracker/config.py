"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./finance_tracker.db"

    # Service
    service_name: str = "finance-tracker"
    log_level: str = "INFO"

    # Recurring expense detection
    recurring_frequency_threshold: float = 3  # average charges per month
    recurring_recent_months: int = 6

    # Analytics views
    top_merchants_limit: int = 5
    high_value_threshold: int = 50_000
    high_value_flag_threshold: int = 300_000
    high_value_limit: int = 5
    category_comparison_limit: int = 5


settings = Settings()
