from datetime import timedelta
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    app_name: str = "weather-aggregator"
    app_version: str = "0.1.0"
    app_env: str = "development"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3899

    # Cache
    redis_url: Optional[str] = None
    cache_ttl_minutes: int = 30

    # Upstreams
    openmeteo_forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    openmeteo_air_quality_url: str = "https://air-quality-api.open-meteo.com/v1/air-quality"
    qweather_url: str = ""
    qweather_project_id: str = ""
    qweather_key_id: str = ""
    qweather_private_key: str = ""

    # HTTP transport
    http_timeout_connect: float = 5.0
    http_timeout_read: float = 15.0
    http_max_retries: int = 2
    http_backoff_factor: float = 0.5

    # Fan-out pool shared by all aggregations
    fetch_max_workers: int = 16

    # .env support and prefix for clarity
    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(minutes=self.cache_ttl_minutes)
