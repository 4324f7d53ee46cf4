"""
This module contains configuration settings for the application.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration using Pydantic BaseSettings.
    Automatically handles environment variable parsing and type conversion.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application settings
    app_name: str = "Watch Weather Cache"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    # Upstream provider settings
    openweatherapi_key: Optional[str] = None
    weather_api_base_url: str = "http://api.openweathermap.org/data/2.5"
    weather_api_timeout: int = 10
    latitude: float = 40.2338
    longitude: float = -111.6585

    # Refresh settings
    enable_refresh: bool = True
    refresh_interval: int = 600
    full_refresh_every: int = 6
    require_current_timestamp: bool = False


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings.
    """
    return Settings()
