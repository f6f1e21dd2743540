"""API-specific dependencies."""

# Re-export common dependencies
from .auth import get_current_principal, require_admin
from .dependencies import (
    get_job_service,
    get_list_cache,
    get_processing_invoker,
    get_s3_image_client,
    get_service_cache,
    get_settings_dependency,
    get_token_verifier,
)

__all__ = [
    "get_current_principal",
    "get_job_service",
    "get_list_cache",
    "get_processing_invoker",
    "get_s3_image_client",
    "get_service_cache",
    "get_settings_dependency",
    "get_token_verifier",
    "require_admin",
]
