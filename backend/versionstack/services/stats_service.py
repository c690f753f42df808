"""Dashboard statistics."""

from dataclasses import dataclass
from datetime import timedelta

from versionstack.repositories.audit_log_repository import AuditLogRepository
from versionstack.repositories.stats_repository import StatsRepository
from versionstack.utils.timezone import get_now

RECENT_UPLOAD_WINDOW = timedelta(days=7)


@dataclass
class RegistryStats:
    total_apps: int
    total_versions: int
    total_storage_bytes: int
    apps_with_active_version: int
    recent_uploads: int


class StatsService:
    def __init__(self, stats_repo: StatsRepository, audit_repo: AuditLogRepository):
        self.stats_repo = stats_repo
        self.audit_repo = audit_repo

    async def get_stats(self) -> RegistryStats:
        since = get_now() - RECENT_UPLOAD_WINDOW
        return RegistryStats(
            total_apps=await self.stats_repo.count_apps(),
            total_versions=await self.stats_repo.count_versions(),
            total_storage_bytes=await self.stats_repo.total_storage_bytes(),
            apps_with_active_version=await self.stats_repo.count_apps_with_active_version(),
            recent_uploads=await self.audit_repo.count_since("version.upload", since),
        )
