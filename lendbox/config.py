"""Configuration management using Pydantic Settings"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (in-memory by default, like the mock dataset it replaces)
    database_url: str = "sqlite+pysqlite:///:memory:"

    # Service
    service_name: str = "lendbox"
    log_level: str = "INFO"

    # Portfolio
    upcoming_window_days: int = 7
    default_collector: str = "System"

    # Loan application defaults
    min_loan_amount: float = 1000.0
    max_loan_amount: float = 500000.0
    default_interest_rate: float = 12.0  # Annual, percentage points
    default_grace_period_days: int = 5
    default_penalty_rate: float = 2.0

    # Event webhook (disabled when unset)
    event_webhook_url: Optional[str] = None
    http_timeout_seconds: float = 5.0
    webhook_max_retries: int = 5
    webhook_backoff_base: float = 1.0  # Exponential backoff base in seconds


settings = Settings()
