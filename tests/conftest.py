"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory job store, dict-backed S3 double, fake token verifier,
PNG factory, and a wired API client.
Dependencies: pytest, sqlalchemy, aiosqlite, fastapi, Pillow
System role: Test infrastructure and fixture management
"""

import asyncio
import io
from datetime import datetime, timedelta, timezone

import pytest
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from imgproc.boundary.auth.cognito_verifier import Principal
from imgproc.boundary.cache.list_cache import TTLListCache
from imgproc.boundary.db.base import Base
from imgproc.configs.settings import Settings
from imgproc.core.exceptions import StorageError, UnauthenticatedError
from imgproc.core.processing.invoker import LocalInvoker
from imgproc.core.processing.processor import ImageProcessor

ADMIN_GROUP = "imgproc-admins"
TOKENS = {"alice": "token-alice", "bob": "token-bob", "admin": "token-admin"}


def make_png(width: int = 32, height: int = 24, color=(200, 40, 40)) -> bytes:
    """Encode a solid-colour RGB PNG."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeImageStore:
    """Dict-backed stand-in for S3ImageClient."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}

    def generate_presigned_upload_url(self, s3_key, content_type="image/png", expires_in=300):
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        return f"https://fake-s3.local/{s3_key}?method=PUT&type={content_type}", expires_at

    def generate_presigned_download_url(self, s3_key, expires_in=300):
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        return f"https://fake-s3.local/{s3_key}?method=GET", expires_at

    def read_bytes(self, s3_key: str) -> bytes:
        if s3_key not in self.objects:
            raise StorageError(f"Object not found in S3: {s3_key}", s3_key)
        return self.objects[s3_key]

    def write_bytes(self, s3_key: str, data: bytes, content_type: str = "image/png") -> None:
        self.objects[s3_key] = data
        self.content_types[s3_key] = content_type


class FakeTokenVerifier:
    """Maps literal bearer tokens to principals."""

    def __init__(self, principals: dict[str, Principal]) -> None:
        self._principals = principals

    def verify(self, token: str) -> Principal:
        try:
            return self._principals[token]
        except KeyError as e:
            raise UnauthenticatedError("Invalid or expired token") from e


@pytest.fixture
def settings() -> Settings:
    """Default settings (local processing, 30s list cache)."""
    return Settings()


@pytest.fixture
def alice() -> Principal:
    return Principal(sub="user-alice", username="alice", email="alice@example.com")


@pytest.fixture
def bob() -> Principal:
    return Principal(sub="user-bob", username="bob", email="bob@example.com")


@pytest.fixture
def admin() -> Principal:
    return Principal(sub="user-admin", username="admin", groups=(ADMIN_GROUP,))


@pytest.fixture
def token_verifier(alice: Principal, bob: Principal, admin: Principal) -> FakeTokenVerifier:
    """Verifier accepting token-alice, token-bob and token-admin."""
    return FakeTokenVerifier(
        {
            TOKENS["alice"]: alice,
            TOKENS["bob"]: bob,
            TOKENS["admin"]: admin,
        }
    )


@pytest.fixture
def png_factory():
    """make_png as a fixture."""
    return make_png


@pytest.fixture
def fake_s3(settings: Settings) -> FakeImageStore:
    """S3 double preloaded with the seed image."""
    store = FakeImageStore()
    store.write_bytes(settings.s3.seed_key, make_png(64, 48))
    return store


@pytest.fixture
def local_invoker(fake_s3: FakeImageStore) -> LocalInvoker:
    return LocalInvoker(ImageProcessor(fake_s3))


@pytest.fixture
def list_cache() -> TTLListCache:
    return TTLListCache(ttl_seconds=30.0)


@pytest.fixture
async def session_factory():
    """
    In-memory SQLite job store shared through a StaticPool.

    Yields:
        async_sessionmaker: Factory bound to a fresh schema
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    await engine.dispose()


@pytest.fixture
async def test_async_db(session_factory):
    """
    Async session over the in-memory job store.

    Yields:
        AsyncSession: Test database session
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def file_session_factory(tmp_path):
    """
    File-backed SQLite store for TestClient-driven tests.

    NullPool opens a connection per session, so the store can be used from
    the event loop TestClient runs the app in.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'jobs.db'}",
        poolclass=NullPool,
    )

    async def _create_schema() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_create_schema())
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
