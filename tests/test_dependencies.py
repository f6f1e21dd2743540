"""
Test suite for dependency injection container.

Tests factory functions for service creation and the process-wide client
cache.

System role: Verification of DI container
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from imgproc.api.deps import get_job_service
from imgproc.api.deps.dependencies import ServiceCache
from imgproc.application.services import JobService
from imgproc.boundary.cache.list_cache import TTLListCache
from imgproc.configs.cache import CacheSettings
from imgproc.configs.processing import ProcessingSettings
from imgproc.configs.settings import Settings
from imgproc.core.processing.invoker import LocalInvoker, WorkerInvoker


@pytest.fixture
def mock_db_session() -> AsyncSession:
    """Provide mock async database session."""
    return AsyncMock(spec=AsyncSession)


class TestGetJobService:
    """Test suite for get_job_service factory."""

    def test_get_job_service_should_wire_collaborators(
        self, mock_db_session: AsyncSession, fake_s3, local_invoker, list_cache, settings
    ) -> None:
        """Test get_job_service builds a JobService over the injected parts."""
        # Act
        service = get_job_service(
            db=mock_db_session,
            s3_client=fake_s3,
            invoker=local_invoker,
            cache=list_cache,
            settings=settings,
        )

        # Assert
        assert isinstance(service, JobService)
        assert service.db is mock_db_session


class TestServiceCache:
    """Test suite for ServiceCache."""

    def test_clients_should_be_built_once(self) -> None:
        """Test lazily built instances are reused."""
        # Arrange
        cache = ServiceCache()
        settings = Settings(list_cache=CacheSettings(ttl_seconds=5, max_entries=10))

        with patch("imgproc.api.deps.dependencies.get_settings", return_value=settings), patch(
            "imgproc.api.deps.dependencies.S3ImageClient"
        ) as mock_s3_class:
            mock_s3_class.return_value = MagicMock()

            # Act
            first_s3 = cache.s3_client
            second_s3 = cache.s3_client
            list_cache = cache.list_cache

        # Assert
        assert first_s3 is second_s3
        mock_s3_class.assert_called_once_with(bucket=settings.s3.bucket, region=settings.s3.region)
        assert isinstance(list_cache, TTLListCache)
        assert list_cache is cache.list_cache

    def test_token_verifier_should_follow_auth_settings(self) -> None:
        """Test Cognito verifier construction."""
        # Arrange
        cache = ServiceCache()
        settings = Settings()

        with patch("imgproc.api.deps.dependencies.get_settings", return_value=settings), patch(
            "imgproc.api.deps.dependencies.CognitoTokenVerifier"
        ) as mock_verifier_class:
            # Act
            verifier = cache.token_verifier

        # Assert
        assert verifier is mock_verifier_class.return_value
        mock_verifier_class.assert_called_once_with(
            user_pool_id=settings.auth.user_pool_id,
            client_id=settings.auth.client_id,
            region=settings.auth.region,
            token_use=settings.auth.token_use,
        )

    def test_invoker_should_follow_processing_mode(self) -> None:
        """Test local and worker modes."""
        # Arrange
        local_cache = ServiceCache()
        worker_cache = ServiceCache()
        local_settings = Settings()
        worker_settings = Settings(
            processing=ProcessingSettings(
                mode="worker", worker_base_url="http://worker:3001", worker_token="secret"
            )
        )

        # Act
        with patch("imgproc.api.deps.dependencies.get_settings", return_value=local_settings), patch(
            "imgproc.api.deps.dependencies.S3ImageClient"
        ):
            local = local_cache.invoker
        with patch(
            "imgproc.api.deps.dependencies.get_settings", return_value=worker_settings
        ), patch("imgproc.api.deps.dependencies.S3ImageClient"):
            worker = worker_cache.invoker

        # Assert
        assert isinstance(local, LocalInvoker)
        assert isinstance(worker, WorkerInvoker)
        assert isinstance(worker_cache.http_client, httpx.AsyncClient)

    @pytest.mark.asyncio
    async def test_aclose_should_close_http_client_and_clear(self) -> None:
        """Test shutdown path."""
        # Arrange
        cache = ServiceCache()
        client = cache.http_client

        # Act
        await cache.aclose()

        # Assert
        assert client.is_closed
        assert cache._http_client is None
