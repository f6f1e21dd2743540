"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from imgproc.configs.auth import AuthSettings
from imgproc.configs.base import BaseSettings
from imgproc.configs.cache import CacheSettings
from imgproc.configs.database import DatabaseSettings
from imgproc.configs.processing import ProcessingSettings
from imgproc.configs.s3 import S3Settings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    s3: S3Settings = Field(default_factory=S3Settings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    processing: ProcessingSettings = Field(default_factory=ProcessingSettings)
    list_cache: CacheSettings = Field(default_factory=CacheSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from imgproc.configs import get_settings
        settings = get_settings()
    """
    return Settings()
