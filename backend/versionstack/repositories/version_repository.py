"""Version repository for versions and their files."""

from dataclasses import dataclass, field

from sqlalchemy import delete, func, select

from versionstack.exceptions import ConflictError, ValidationError
from versionstack.models import Version, VersionFile
from versionstack.repositories.base import BaseRepository

ACTIVE_VERSION_DELETE_MESSAGE = (
    "Cannot delete the active version. Set another version as active first."
)


@dataclass
class VersionWithFiles:
    """A version together with its file rows."""

    version: Version
    files: list[VersionFile] = field(default_factory=list)


class VersionRepository(BaseRepository):
    """Repository for Version and VersionFile models."""

    @staticmethod
    def _newest_first(query):
        # id breaks ties between versions created within the same timestamp tick
        return query.order_by(Version.created_at.desc(), Version.id.desc())

    async def find_by_app_id(self, app_id: int) -> list[Version]:
        """Get an app's versions, newest first."""
        result = await self._execute(
            self._newest_first(select(Version).where(Version.app_id == app_id))
        )
        return list(result.scalars().all())

    async def count_by_app_id(self, app_id: int) -> int:
        result = await self._execute(
            select(func.count(Version.id)).where(Version.app_id == app_id)
        )
        return result.scalar_one()

    async def find_by_id(self, version_id: int) -> Version | None:
        result = await self._execute(select(Version).where(Version.id == version_id))
        return result.scalar_one_or_none()

    async def find_by_id_and_app_id(self, version_id: int, app_id: int) -> Version | None:
        """Scoped lookup: a version of another app reads as missing."""
        result = await self._execute(
            select(Version).where(Version.id == version_id, Version.app_id == app_id)
        )
        return result.scalar_one_or_none()

    async def find_by_app_id_and_name(self, app_id: int, version_name: str) -> Version | None:
        """Advisory pre-check; the (app_id, version_name) unique constraint is the real guard."""
        result = await self._execute(
            select(Version).where(Version.app_id == app_id, Version.version_name == version_name)
        )
        return result.scalar_one_or_none()

    async def find_latest(self, app_id: int) -> Version | None:
        """Most recently created version of an app."""
        result = await self._execute(
            self._newest_first(select(Version).where(Version.app_id == app_id)).limit(1)
        )
        return result.scalar_one_or_none()

    async def find_latest_version_name(self, app_id: int) -> str | None:
        latest = await self.find_latest(app_id)
        return latest.version_name if latest else None

    async def create(self, app_id: int, version_name: str) -> Version:
        """
        Insert a version row.

        Raises:
            ConflictError: If the name was taken for this app in the meantime
        """
        version = Version(app_id=app_id, version_name=version_name, is_active=True)
        self.db.add(version)
        await self._flush(lambda: ConflictError(f"Version {version_name} already exists"))
        return version

    async def delete(self, version_id: int) -> None:
        """
        Delete a version row.

        Raises:
            ValidationError: The version is still some app's active version
        """
        await self._execute(
            delete(Version).where(Version.id == version_id),
            on_integrity_error=lambda: ValidationError(ACTIVE_VERSION_DELETE_MESSAGE),
        )

    async def delete_by_app_id(self, app_id: int) -> None:
        await self._execute(delete(Version).where(Version.app_id == app_id))

    # Version files

    async def find_files_by_version_id(self, version_id: int) -> list[VersionFile]:
        result = await self._execute(
            select(VersionFile)
            .where(VersionFile.version_id == version_id)
            .order_by(VersionFile.file_name)
        )
        return list(result.scalars().all())

    async def create_file(
        self, version_id: int, file_name: str, file_hash: str, file_size: int
    ) -> VersionFile:
        version_file = VersionFile(
            version_id=version_id,
            file_name=file_name,
            file_hash=file_hash,
            file_size=file_size,
        )
        self.db.add(version_file)
        await self._flush(lambda: ConflictError(f"File {file_name} already exists"))
        return version_file

    async def delete_files_by_version_id(self, version_id: int) -> None:
        await self._execute(delete(VersionFile).where(VersionFile.version_id == version_id))

    async def delete_files_by_app_id(self, app_id: int) -> None:
        await self._execute(
            delete(VersionFile).where(
                VersionFile.version_id.in_(select(Version.id).where(Version.app_id == app_id))
            )
        )

    async def find_all_with_files(self, app_id: int) -> list[VersionWithFiles]:
        """
        Get all versions of an app with their files.

        Files are fetched with a single IN (...) query over the version ids
        rather than one query per version.

        Args:
            app_id: App ID

        Returns:
            Versions newest first, each with its files ordered by name
        """
        versions = await self.find_by_app_id(app_id)
        if not versions:
            return []

        version_ids = [version.id for version in versions]
        files_result = await self._execute(
            select(VersionFile)
            .where(VersionFile.version_id.in_(version_ids))
            .order_by(VersionFile.file_name)
        )

        files_by_version: dict[int, list[VersionFile]] = {}
        for version_file in files_result.scalars().all():
            files_by_version.setdefault(version_file.version_id, []).append(version_file)

        return [
            VersionWithFiles(version=version, files=files_by_version.get(version.id, []))
            for version in versions
        ]
