"""
Application settings.

Values come from the environment (prefix ``RARE_BIRD_``) or a local ``.env``
file. The eBird key here is only a convenience for the CLI; the API client
never reads it implicitly.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the proxy and the CLI."""

    model_config = SettingsConfigDict(
        env_prefix="RARE_BIRD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "rare-bird-alerts"
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Proxy server
    api_host: str = "127.0.0.1"
    api_port: int = Field(default=8000, ge=1, le=65535)
    proxy_path: str = "/api/ebird"

    # Upstream (eBird API v2)
    ebird_api_base: str = "https://api.ebird.org/v2"
    client_agent: str = "eBird-Rare-Alerts/1.0"

    # Client side
    proxy_url: str = "http://127.0.0.1:8000"
    request_timeout: float | None = None  # None: wait indefinitely
    ebird_api_key: str | None = None


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
