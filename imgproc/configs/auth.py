"""
Authentication configuration settings.

Cognito user pool parameters used to verify bearer ID tokens.

Dependencies: pydantic_settings
System role: Identity provider configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    """Cognito token verification settings."""

    model_config = SettingsConfigDict(
        env_prefix="COGNITO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    user_pool_id: str = Field(default="", description="Cognito user pool ID")
    client_id: str = Field(default="", description="Cognito app client ID")
    region: str = Field(default="ap-southeast-2", description="Cognito region")
    token_use: str = Field(
        default="id",
        description="Expected token_use claim (id or access)",
    )
    admin_group: str = Field(
        default="imgproc-admins",
        description="Cognito group granting the administrator capability",
    )
