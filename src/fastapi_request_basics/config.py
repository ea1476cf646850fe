"""BasicsSettings — environment-driven configuration."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BasicsSettings(BaseSettings):
    """Runtime settings, read from ``BASICS_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="BASICS_", extra="ignore")

    # Same default as the 1mb limit of common JSON body parsers
    body_limit: int = Field(default=1024 * 1024, gt=0)
    query_body_key: str = "body"
    default_locale: str = "en"
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"
    log_json: bool = False


@lru_cache
def get_settings() -> BasicsSettings:
    return BasicsSettings()
