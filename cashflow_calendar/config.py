"""Configuration management using Pydantic Settings"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "cashflow-calendar"
    log_level: str = "INFO"
    calendar_verbose: bool = False  # DEBUG trace of every projected day

    # Forecast defaults
    default_horizon_days: int = 60
    default_safety_buffer_cents: int = 50_000  # $500
    default_timezone: Optional[str] = None
    safe_to_spend_window_days: int = 14

    # Scenario ("can I afford this?")
    low_balance_threshold_cents: int = 10_000  # $100
    preview_radius_days: int = 3

    # Bill collisions
    collision_min_bills_warning: int = 2
    collision_min_bills_critical: int = 4
    collision_critical_amount_cents: int = 100_000  # $1000


settings = Settings()
