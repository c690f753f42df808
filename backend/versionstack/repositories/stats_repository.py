"""Aggregate queries for the dashboard."""

from sqlalchemy import func, select

from versionstack.models import App, Version, VersionFile
from versionstack.repositories.base import BaseRepository


class StatsRepository(BaseRepository):
    """Read-only counters over apps, versions and files."""

    async def count_apps(self) -> int:
        result = await self._execute(select(func.count(App.id)))
        return result.scalar() or 0

    async def count_versions(self) -> int:
        result = await self._execute(select(func.count(Version.id)))
        return result.scalar() or 0

    async def total_storage_bytes(self) -> int:
        result = await self._execute(select(func.coalesce(func.sum(VersionFile.file_size), 0)))
        return int(result.scalar() or 0)

    async def count_apps_with_active_version(self) -> int:
        result = await self._execute(
            select(func.count(App.id)).where(App.current_version_id.is_not(None))
        )
        return result.scalar() or 0
