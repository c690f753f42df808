"""Dependency injection for repositories."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from versionstack.db import get_db
from versionstack.repositories.api_key_repository import APIKeyRepository
from versionstack.repositories.app_repository import AppRepository
from versionstack.repositories.audit_log_repository import AuditLogRepository
from versionstack.repositories.stats_repository import StatsRepository
from versionstack.repositories.version_repository import VersionRepository


def get_app_repository(db: AsyncSession = Depends(get_db)) -> AppRepository:
    """
    Get AppRepository instance.

    Args:
        db: Database session from dependency

    Returns:
        AppRepository instance
    """
    return AppRepository(db)


def get_version_repository(db: AsyncSession = Depends(get_db)) -> VersionRepository:
    """
    Get VersionRepository instance.

    Args:
        db: Database session from dependency

    Returns:
        VersionRepository instance
    """
    return VersionRepository(db)


def get_api_key_repository(db: AsyncSession = Depends(get_db)) -> APIKeyRepository:
    return APIKeyRepository(db)


def get_audit_log_repository(db: AsyncSession = Depends(get_db)) -> AuditLogRepository:
    return AuditLogRepository(db)


def get_stats_repository(db: AsyncSession = Depends(get_db)) -> StatsRepository:
    return StatsRepository(db)
