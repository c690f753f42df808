"""Composition point: builds services from the request's repositories."""

from functools import lru_cache

from fastapi import Depends, Request

from versionstack.config import settings
from versionstack.repositories.api_key_repository import APIKeyRepository
from versionstack.repositories.app_repository import AppRepository
from versionstack.repositories.audit_log_repository import AuditLogRepository
from versionstack.repositories.dependencies import (
    get_api_key_repository,
    get_app_repository,
    get_audit_log_repository,
    get_stats_repository,
    get_version_repository,
)
from versionstack.repositories.stats_repository import StatsRepository
from versionstack.repositories.version_repository import VersionRepository
from versionstack.services.api_key_service import APIKeyService
from versionstack.services.app_service import AppService
from versionstack.services.audit_logger import AuditLogger
from versionstack.services.audit_service import AuditService
from versionstack.services.stats_service import StatsService
from versionstack.services.tokens import TokenCodec
from versionstack.services.version_service import VersionService
from versionstack.storage import ContentStore


@lru_cache
def get_content_store() -> ContentStore:
    """One content store per process, rooted at the configured files directory."""
    return ContentStore(settings.files_dir, chunk_size=settings.upload_chunk_size)


@lru_cache
def get_token_codec() -> TokenCodec:
    return TokenCodec()


def get_audit_logger() -> AuditLogger:
    return AuditLogger()


def get_app_service(
    app_repo: AppRepository = Depends(get_app_repository),
    version_repo: VersionRepository = Depends(get_version_repository),
    content_store: ContentStore = Depends(get_content_store),
    audit: AuditLogger = Depends(get_audit_logger),
) -> AppService:
    return AppService(app_repo, version_repo, content_store, audit)


def get_version_service(
    app_repo: AppRepository = Depends(get_app_repository),
    version_repo: VersionRepository = Depends(get_version_repository),
    content_store: ContentStore = Depends(get_content_store),
    audit: AuditLogger = Depends(get_audit_logger),
) -> VersionService:
    return VersionService(app_repo, version_repo, content_store, audit)


def get_api_key_service(
    api_key_repo: APIKeyRepository = Depends(get_api_key_repository),
    app_repo: AppRepository = Depends(get_app_repository),
    audit: AuditLogger = Depends(get_audit_logger),
    tokens: TokenCodec = Depends(get_token_codec),
) -> APIKeyService:
    return APIKeyService(api_key_repo, app_repo, audit, tokens=tokens)


def get_audit_service(
    audit_repo: AuditLogRepository = Depends(get_audit_log_repository),
) -> AuditService:
    return AuditService(audit_repo)


def get_stats_service(
    stats_repo: StatsRepository = Depends(get_stats_repository),
    audit_repo: AuditLogRepository = Depends(get_audit_log_repository),
) -> StatsService:
    return StatsService(stats_repo, audit_repo)


def get_client_ip(request: Request) -> str | None:
    """Client address, preferring the first hop of X-Forwarded-For set by the gateway."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.client.host if request.client else None
