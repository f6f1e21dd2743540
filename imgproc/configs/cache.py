"""
List cache configuration settings.

Dependencies: pydantic_settings
System role: Job listing cache configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseSettings):
    """Per-owner job listing cache settings."""

    model_config = SettingsConfigDict(
        env_prefix="LIST_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    ttl_seconds: float = Field(default=30.0, description="Entry lifetime in seconds")
    max_entries: int | None = Field(
        default=None,
        description="Optional bound on cached owners (oldest evicted first)",
    )
