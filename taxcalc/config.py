"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Monobank
    monobank_api_token: str = ""
    monobank_api_url: str = "https://api.monobank.ua"

    # Cache
    redis_url: str = "redis://localhost:6379/0"
    redis_cache_ttl: int = 60 * 60  # seconds

    # Tax calculation
    period_in_months: int = 3  # a regular tax quarter
    general_tax_rate: float = 0.05
    military_tax_rate: float = 0.01
    aggregation_failure_policy: str = "abort"  # abort | collect

    # Service
    service_name: str = "taxcalc"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 10.0
    rate_limit_delay_seconds: float = 60.0  # Monobank allows one statement call per minute


settings = Settings()
