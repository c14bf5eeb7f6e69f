from __future__ import annotations

from pydantic import BaseModel, Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseModel):
    quote_ttl_seconds: float = 60.0
    alert_ttl_seconds: float = 300.0


class AlertSettings(BaseModel):
    per_provider_limit: int = 5
    max_alerts: int = 10


class ProviderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MARKETDESK_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )
    alpha_vantage_api_key: str | None = None
    finnhub_api_key: str | None = None
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    request_timeout_seconds: float = 10.0
    # EDGAR rejects requests without a descriptive User-Agent.
    sec_user_agent: str = "marketdesk research (contact@example.com)"
    news_lookback_days: int = 30


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MARKETDESK_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias=AliasChoices("REDIS_URL", "MARKETDESK_REDIS_URL"),
    )
    job_queue_name: str = Field(
        default="quotes",
        validation_alias=AliasChoices("JOB_QUEUE_NAME", "MARKETDESK_JOB_QUEUE_NAME"),
    )
    log_level: str = "INFO"

    cache: CacheSettings = Field(default_factory=CacheSettings)
    alerts: AlertSettings = Field(default_factory=AlertSettings)
    providers: ProviderSettings = Field(default_factory=ProviderSettings)


settings = Settings()
