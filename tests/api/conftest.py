"""
API test fixtures.

Builds the real application with the job store, S3, invoker, list cache and
token verifier replaced through dependency_overrides.
"""

import pytest
from fastapi.testclient import TestClient

from imgproc.api.deps import (
    get_list_cache,
    get_processing_invoker,
    get_s3_image_client,
    get_settings_dependency,
    get_token_verifier,
)
from imgproc.boundary.db import get_async_db
from imgproc.main import create_app


@pytest.fixture
def auth():
    """Build the Authorization header for alice, bob or admin."""

    def _auth(name: str) -> dict[str, str]:
        return {"Authorization": f"Bearer token-{name}"}

    return _auth


@pytest.fixture
def app(settings, fake_s3, local_invoker, list_cache, file_session_factory, token_verifier):
    """Application wired to test doubles."""
    application = create_app()

    async def override_db():
        async with file_session_factory() as session:
            yield session

    application.dependency_overrides[get_async_db] = override_db
    application.dependency_overrides[get_s3_image_client] = lambda: fake_s3
    application.dependency_overrides[get_processing_invoker] = lambda: local_invoker
    application.dependency_overrides[get_list_cache] = lambda: list_cache
    application.dependency_overrides[get_token_verifier] = lambda: token_verifier
    application.dependency_overrides[get_settings_dependency] = lambda: settings
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
