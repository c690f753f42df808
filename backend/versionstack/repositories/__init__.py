"""Repository pattern implementation for database queries."""

from versionstack.repositories.api_key_repository import APIKeyRepository
from versionstack.repositories.app_repository import AppRepository
from versionstack.repositories.audit_log_repository import AuditLogRepository
from versionstack.repositories.base import BaseRepository
from versionstack.repositories.stats_repository import StatsRepository
from versionstack.repositories.version_repository import VersionRepository, VersionWithFiles

__all__ = [
    "BaseRepository",
    "AppRepository",
    "VersionRepository",
    "VersionWithFiles",
    "APIKeyRepository",
    "AuditLogRepository",
    "StatsRepository",
]
