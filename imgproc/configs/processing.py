"""
Processing configuration settings.

Selects how image transformations are executed (in-process, remote HTTP
worker, or SQS queue) and carries the parameters for each mode.

Dependencies: pydantic_settings
System role: Processing invoker configuration
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProcessingSettings(BaseSettings):
    """Processing invoker settings."""

    model_config = SettingsConfigDict(
        env_prefix="PROCESSING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    mode: Literal["local", "worker", "queue"] = Field(
        default="local",
        description="Where transforms run: local, worker (HTTP) or queue (SQS)",
    )

    worker_base_url: str | None = Field(
        default=None,
        description="Base URL of the remote processing worker",
    )
    worker_token: str | None = Field(
        default=None,
        description="Shared secret sent as X-Worker-Token",
    )
    worker_timeout: float = Field(
        default=120.0,
        description="Remote worker request timeout in seconds",
    )
    max_output_pixels: int = Field(
        default=50_000_000,
        gt=0,
        description="Largest width x height a resize step may produce",
    )

    queue_url: str | None = Field(default=None, description="SQS queue URL")
    queue_region: str = Field(default="ap-southeast-2", description="SQS region")
    queue_wait_seconds: int = Field(
        default=20,
        description="Long-poll wait window for receive_message",
    )
    queue_visibility_timeout: int = Field(
        default=300,
        description="Visibility timeout applied to received messages",
    )
    queue_idle_delay: float = Field(
        default=1.0,
        description="Delay before polling again after an empty or failed receive",
    )
