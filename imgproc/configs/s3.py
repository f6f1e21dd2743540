"""
S3 image bucket configuration.

Settings for the bucket holding job inputs/outputs and for presigned URL generation.

Dependencies: pydantic_settings
System role: S3 bucket configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class S3Settings(BaseSettings):
    """Settings for S3 image bucket operations."""

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str = Field(
        default="imgproc-dev-images",
        description="S3 bucket for job inputs and outputs",
    )
    region: str = Field(
        default="ap-southeast-2",
        description="AWS region for S3 bucket",
    )
    upload_url_expiry: int = Field(
        default=300,
        description="Presigned upload URL expiry in seconds",
    )
    download_url_expiry: int = Field(
        default=300,
        description="Presigned download URL expiry in seconds",
    )
    seed_key: str = Field(
        default="seed/seed.png",
        description="Object key of the shared seed image",
    )
    allowed_upload_types: list[str] = Field(
        default=["image/png", "image/jpeg"],
        description="Content types accepted for uploads",
    )
    max_inline_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum size of an image uploaded inline with job creation",
    )
