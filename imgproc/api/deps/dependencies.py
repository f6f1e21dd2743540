"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: imgproc.configs, imgproc.application, imgproc.boundary, imgproc.core
System role: DI container for service injection
"""

from functools import lru_cache

import httpx
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from imgproc.application.services import JobService
from imgproc.boundary.auth.cognito_verifier import CognitoTokenVerifier, TokenVerifier
from imgproc.boundary.aws.s3_client import S3ImageClient
from imgproc.boundary.cache.list_cache import ListCache, TTLListCache
from imgproc.boundary.db import get_async_db
from imgproc.configs import Settings, get_settings
from imgproc.core.processing.invoker import ProcessingInvoker, build_invoker


class ServiceCache:
    """Container for process-wide client instances."""

    def __init__(self):
        self._s3_client = None
        self._list_cache = None
        self._token_verifier = None
        self._http_client = None
        self._invoker = None

    @property
    def s3_client(self) -> S3ImageClient:
        """Get cached S3 image client."""
        if self._s3_client is None:
            settings = get_settings()
            self._s3_client = S3ImageClient(
                bucket=settings.s3.bucket,
                region=settings.s3.region,
            )
        return self._s3_client

    @property
    def list_cache(self) -> ListCache:
        """Get the per-owner listing cache (shared by all requests)."""
        if self._list_cache is None:
            settings = get_settings()
            self._list_cache = TTLListCache(
                ttl_seconds=settings.list_cache.ttl_seconds,
                max_entries=settings.list_cache.max_entries,
            )
        return self._list_cache

    @property
    def token_verifier(self) -> TokenVerifier:
        """Get cached Cognito verifier (JWKS keys cached inside)."""
        if self._token_verifier is None:
            auth = get_settings().auth
            self._token_verifier = CognitoTokenVerifier(
                user_pool_id=auth.user_pool_id,
                client_id=auth.client_id,
                region=auth.region,
                token_use=auth.token_use,
            )
        return self._token_verifier

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Get shared HTTP client for the remote worker."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient()
        return self._http_client

    @property
    def invoker(self) -> ProcessingInvoker:
        """Get the processing invoker selected by PROCESSING_MODE."""
        if self._invoker is None:
            settings = get_settings()
            self._invoker = build_invoker(
                settings,
                self.s3_client,
                http_client=self.http_client if settings.processing.mode == "worker" else None,
            )
        return self._invoker

    async def aclose(self) -> None:
        """Close network clients held by the cache."""
        if self._http_client is not None:
            await self._http_client.aclose()
        self.clear()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._s3_client = None
        self._list_cache = None
        self._token_verifier = None
        self._http_client = None
        self._invoker = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_s3_image_client() -> S3ImageClient:
    """Get S3 client for presigned URLs and blob I/O."""
    return get_service_cache().s3_client


def get_list_cache() -> ListCache:
    """Get the shared job listing cache."""
    return get_service_cache().list_cache


def get_token_verifier() -> TokenVerifier:
    """Get the bearer token verifier."""
    return get_service_cache().token_verifier


def get_processing_invoker() -> ProcessingInvoker:
    """Get the configured processing invoker."""
    return get_service_cache().invoker


def get_job_service(
    db: AsyncSession = Depends(get_async_db),
    s3_client: S3ImageClient = Depends(get_s3_image_client),
    invoker: ProcessingInvoker = Depends(get_processing_invoker),
    cache: ListCache = Depends(get_list_cache),
    settings: Settings = Depends(get_settings_dependency),
) -> JobService:
    """
    Get job service instance.

    Args:
        db: Async database session (injected via Depends)
        s3_client: S3 image client (injected)
        invoker: Processing invoker (injected)
        cache: Listing cache (injected)
        settings: Application settings (injected)

    Returns:
        JobService: Job service instance
    """
    return JobService(
        db=db,
        s3_client=s3_client,
        invoker=invoker,
        cache=cache,
        settings=settings,
    )
