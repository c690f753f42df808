"""Pytest configuration and shared fixtures."""

import os
import sys
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = Path(__file__).resolve().parents[1]
project_root_str = str(PROJECT_ROOT)
if project_root_str in sys.path:
    sys.path.remove(project_root_str)
sys.path.insert(0, project_root_str)

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ADMIN_API_KEY", "test-bootstrap-admin-key")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")

# ruff: noqa: E402 - Imports must come after environment variable setup
from versionstack.config import settings
from versionstack.db import Base, enable_sqlite_foreign_keys, get_db
from versionstack.dependencies.services import get_audit_logger, get_content_store, get_token_codec
from versionstack.main import app
from versionstack.repositories import (
    APIKeyRepository,
    AppRepository,
    AuditLogRepository,
    StatsRepository,
    VersionRepository,
)
from versionstack.services.api_key_service import APIKeyService
from versionstack.services.app_service import AppService
from versionstack.services.audit_logger import AuditLogger
from versionstack.services.version_service import VersionService
from versionstack.storage import ContentStore, UploadedFile

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_API_KEY = os.environ["ADMIN_API_KEY"]


@pytest.fixture
async def db_engine():
    """Create test database engine with foreign keys enforced."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        # In-memory database disappears with the engine; apps <-> versions
        # reference each other so drop_all would trip the FK check.
        await engine.dispose(close=True)


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession]:
    """Create test database session."""
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()


@pytest.fixture
def content_store(tmp_path) -> ContentStore:
    return ContentStore(tmp_path / "files", chunk_size=4)


@pytest.fixture
def audit_logger(session_factory) -> AuditLogger:
    return AuditLogger(session_factory)


@pytest.fixture
def app_repo(db_session) -> AppRepository:
    return AppRepository(db_session)


@pytest.fixture
def version_repo(db_session) -> VersionRepository:
    return VersionRepository(db_session)


@pytest.fixture
def api_key_repo(db_session) -> APIKeyRepository:
    return APIKeyRepository(db_session)


@pytest.fixture
def audit_repo(db_session) -> AuditLogRepository:
    return AuditLogRepository(db_session)


@pytest.fixture
def stats_repo(db_session) -> StatsRepository:
    return StatsRepository(db_session)


@pytest.fixture
def app_service(app_repo, version_repo, content_store, audit_logger) -> AppService:
    return AppService(app_repo, version_repo, content_store, audit_logger)


@pytest.fixture
def version_service(app_repo, version_repo, content_store, audit_logger) -> VersionService:
    return VersionService(app_repo, version_repo, content_store, audit_logger)


@pytest.fixture
def api_key_service(api_key_repo, app_repo, audit_logger) -> APIKeyService:
    return APIKeyService(api_key_repo, app_repo, audit_logger, admin_api_key=ADMIN_API_KEY)


@pytest.fixture
async def client(db_session: AsyncSession, content_store, audit_logger, tmp_path, monkeypatch):
    """Create test client with database, content store and audit overrides."""

    async def override_get_db():
        yield db_session

    monkeypatch.setattr(settings, "tmp_upload_dir", str(tmp_path / "tmp_uploads"))

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_content_store] = lambda: content_store
    app.dependency_overrides[get_audit_logger] = lambda: audit_logger

    test_client = AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test", follow_redirects=True
    )

    try:
        yield test_client
    finally:
        await test_client.aclose()
        app.dependency_overrides.clear()


# ============================================
# Factory Fixtures
# ============================================


@pytest.fixture
def make_upload(tmp_path):
    """Factory fixture writing bytes to a spooled temp file.

    Usage:
        uploaded = make_upload("fw.bin", b"0123456789")
    """
    spool_dir = tmp_path / "spool"
    spool_dir.mkdir(exist_ok=True)
    counter = {"n": 0}

    def _make_upload(file_name: str = "fw.bin", content: bytes = b"0123456789") -> UploadedFile:
        counter["n"] += 1
        path = spool_dir / f"upload-{counter['n']}"
        path.write_bytes(content)
        return UploadedFile(
            temporary_path=path, original_file_name=file_name, size_bytes=len(content)
        )

    return _make_upload


@pytest.fixture
def make_app(db_session: AsyncSession):
    """Factory fixture inserting App rows directly.

    Usage:
        app = await make_app(app_key="firmware", is_public=True)
    """

    async def _make_app(**kwargs):
        from versionstack.models import App

        defaults = {"app_key": "firmware", "display_name": "Firmware", "is_public": False}
        record = App(**{**defaults, **kwargs})
        db_session.add(record)
        await db_session.commit()
        return record

    return _make_app


@pytest.fixture
def make_token():
    """Factory fixture issuing session tokens.

    Usage:
        token = make_token("write", app_scope=["firmware"])
    """

    def _make_token(permission: str = "admin", app_scope: list[str] | None = None, key_id=None):
        return get_token_codec().issue(key_id, permission, app_scope)

    return _make_token


@pytest.fixture
def auth_headers(make_token):
    """Factory fixture returning an Authorization header dict."""

    def _auth_headers(permission: str = "admin", app_scope: list[str] | None = None, key_id=None):
        return {"Authorization": f"Bearer {make_token(permission, app_scope, key_id)}"}

    return _auth_headers
