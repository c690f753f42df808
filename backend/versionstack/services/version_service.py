"""Version lifecycle: upload, list, activate, delete and resolve latest."""

import logging
from dataclasses import dataclass

from versionstack.exceptions import (
    AppNotFoundError,
    ConflictError,
    ValidationError,
    VersionNotFoundError,
)
from versionstack.models import App, Version, VersionFile
from versionstack.repositories.app_repository import AppRepository
from versionstack.repositories.version_repository import (
    ACTIVE_VERSION_DELETE_MESSAGE,
    VersionRepository,
    VersionWithFiles,
)
from versionstack.services.access_control import SessionToken, ensure_latest_version_readable
from versionstack.services.audit_logger import SYSTEM_ACTOR, Actor, AuditLogger
from versionstack.storage import ContentStore, StoredFile, UploadedFile
from versionstack.utils.log_redaction import sanitize_for_log
from versionstack.utils.versioning import next_version_name
from versionstack.validators import sanitize_file_name, validate_version_name

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    app: App
    version: Version
    files: list[VersionFile]


@dataclass
class LatestVersion:
    app: App
    version: Version
    files: list[VersionFile]


class VersionService:
    """Service for managing versions of an app."""

    def __init__(
        self,
        app_repo: AppRepository,
        version_repo: VersionRepository,
        content_store: ContentStore,
        audit: AuditLogger,
    ):
        self.app_repo = app_repo
        self.version_repo = version_repo
        self.content_store = content_store
        self.audit = audit

    async def _get_app(self, app_key: str) -> App:
        app = await self.app_repo.find_by_key(app_key)
        if not app:
            raise AppNotFoundError(app_key)
        return app

    async def _get_version(self, app: App, version_id: int) -> Version:
        # Scoped to the app: another app's version reads as missing
        version = await self.version_repo.find_by_id_and_app_id(version_id, app.id)
        if not version:
            raise VersionNotFoundError(version_id)
        return version

    async def list_versions(self, app_key: str) -> tuple[App, list[VersionWithFiles]]:
        """
        List an app's versions newest first, each with its files.

        Returns:
            Tuple of (app, versions with files); the app carries the active pointer
        """
        app = await self._get_app(app_key)
        return app, await self.version_repo.find_all_with_files(app.id)

    async def get_latest_version(
        self, app_key: str, token: SessionToken | None
    ) -> LatestVersion:
        """
        Resolve the version update clients should install.

        Public apps need no token. The active version wins; apps that never
        had one fall back to their most recently created version.

        Raises:
            AppNotFoundError: Unknown app
            UnauthorizedError: Private app and no token
            ForbiddenError: Token scope excludes the app
            VersionNotFoundError: App has no versions
        """
        app = await self._get_app(app_key)
        ensure_latest_version_readable(app.is_public, app.app_key, token)

        version = None
        if app.current_version_id is not None:
            version = await self.version_repo.find_by_id_and_app_id(app.current_version_id, app.id)
        if version is None:
            version = await self.version_repo.find_latest(app.id)
        if version is None:
            raise VersionNotFoundError()

        files = await self.version_repo.find_files_by_version_id(version.id)
        return LatestVersion(app=app, version=version, files=files)

    async def _resolve_version_name(self, app: App, requested: str | None) -> str:
        if requested is not None and requested.strip():
            return validate_version_name(requested)
        latest_name = await self.version_repo.find_latest_version_name(app.id)
        # Appending ".1" can push a derived name past the length limit
        return validate_version_name(next_version_name(latest_name))

    @staticmethod
    def _check_file_names(files: list[UploadedFile]) -> None:
        seen: set[str] = set()
        for uploaded in files:
            name = sanitize_file_name(uploaded.original_file_name)
            if not name or name == ".":
                raise ValidationError(
                    "Invalid file name",
                    details={"files": [sanitize_for_log(uploaded.original_file_name)]},
                )
            if name in seen:
                raise ValidationError(
                    "Duplicate file name in upload", details={"files": [name]}
                )
            seen.add(name)

    async def upload_version(
        self,
        app_key: str,
        version_name: str | None,
        files: list[UploadedFile],
        actor: Actor = SYSTEM_ACTOR,
    ) -> UploadResult:
        """
        Store a new version and make it the app's active version.

        Temp files are removed on every failure path. The version row, its
        file rows and the active pointer are committed together, so a failed
        upload leaves no rows behind; files already moved into the store are
        removed again.

        Args:
            app_key: Owning app
            version_name: Explicit name, or None/blank to derive the next one
            files: Spooled uploads
            actor: Acting key and client address

        Raises:
            ValidationError: No files, bad version name or bad file name
            AppNotFoundError: Unknown app
            ConflictError: The resolved name already exists for this app
            StorageError: Filesystem failure while storing
        """
        if not files:
            raise ValidationError("At least one file is required")

        stored: list[StoredFile] = []
        resolved_name: str | None = None
        try:
            app = await self._get_app(app_key)
            self._check_file_names(files)
            resolved_name = await self._resolve_version_name(app, version_name)

            if await self.version_repo.find_by_app_id_and_name(app.id, resolved_name):
                raise ConflictError(f"Version {resolved_name} already exists")

            async def _create() -> tuple[Version, list[VersionFile]]:
                version = await self.version_repo.create(app.id, resolved_name)
                rows = []
                for uploaded in files:
                    result = await self.content_store.save_file(app_key, resolved_name, uploaded)
                    stored.append(result)
                    rows.append(
                        await self.version_repo.create_file(
                            version.id, result.file_name, result.file_hash, result.file_size
                        )
                    )
                await self.app_repo.set_current_version(app.id, version.id)
                return version, rows

            version, rows = await self.version_repo.with_transaction(_create)
        except Exception:
            self.content_store.cleanup_temp_files(files)
            if stored and resolved_name is not None:
                await self._discard_stored(app_key, resolved_name, stored)
            raise

        total_size = sum(row.file_size for row in rows)
        logger.info(
            f"Uploaded {sanitize_for_log(app_key)}/{sanitize_for_log(resolved_name)} "
            f"({len(rows)} files, {total_size} bytes)"
        )

        await self.audit.log(
            "version.upload",
            "version",
            f"{app_key}/{resolved_name}",
            actor,
            {
                "versionId": version.id,
                "fileCount": len(rows),
                "totalSize": total_size,
                "files": [row.file_name for row in rows],
            },
        )
        return UploadResult(app=app, version=version, files=rows)

    async def _discard_stored(
        self, app_key: str, version_name: str, stored: list[StoredFile]
    ) -> None:
        """Remove files moved into place by an upload whose rows were rolled back."""
        for result in stored:
            try:
                await self.content_store.delete_file(app_key, version_name, result.file_name)
            except Exception as e:
                logger.warning(f"Could not discard {sanitize_for_log(result.file_name)}: {e}")
        try:
            await self.content_store.delete_version_directory(app_key, version_name)
        except Exception as e:
            logger.warning(
                f"Could not remove version directory {sanitize_for_log(version_name)}: {e}"
            )

    async def set_active_version(
        self, app_key: str, version_id: int, actor: Actor = SYSTEM_ACTOR
    ) -> tuple[App, Version, list[VersionFile]]:
        """Point the app at one of its own versions."""
        app = await self._get_app(app_key)
        version = await self._get_version(app, version_id)
        previous_id = app.current_version_id

        async def _activate() -> None:
            await self.app_repo.set_current_version(app.id, version.id)

        await self.app_repo.with_transaction(_activate)

        await self.audit.log(
            "version.set_active",
            "version",
            f"{app_key}/{version.version_name}",
            actor,
            {"versionId": version.id, "previousVersionId": previous_id},
        )
        files = await self.version_repo.find_files_by_version_id(version.id)
        return app, version, files

    async def delete_version(
        self, app_key: str, version_id: int, actor: Actor = SYSTEM_ACTOR
    ) -> Version:
        """
        Delete an inactive version, its file rows and its stored files.

        Raises:
            AppNotFoundError: Unknown app
            VersionNotFoundError: Version absent or owned by another app
            ValidationError: The version is the app's active version
            StorageError: Rows were deleted but a stored file could not be
        """
        app = await self._get_app(app_key)
        version = await self._get_version(app, version_id)

        if app.current_version_id == version.id:
            raise ValidationError(ACTIVE_VERSION_DELETE_MESSAGE)

        files = await self.version_repo.find_files_by_version_id(version.id)
        version_name = version.version_name
        app_id = app.id

        async def _delete() -> None:
            # Another request may have activated this version since the check above
            if await self.app_repo.find_current_version_id(app_id) == version_id:
                raise ValidationError(ACTIVE_VERSION_DELETE_MESSAGE)
            await self.version_repo.delete_files_by_version_id(version_id)
            await self.version_repo.delete(version_id)

        await self.version_repo.with_transaction(_delete)
        logger.info(
            f"Deleted version {sanitize_for_log(app_key)}/{sanitize_for_log(version_name)}"
        )

        await self.audit.log(
            "version.delete",
            "version",
            f"{app_key}/{version_name}",
            actor,
            {"versionId": version_id, "fileCount": len(files)},
        )

        for version_file in files:
            await self.content_store.delete_file(app_key, version_name, version_file.file_name)
        await self.content_store.delete_version_directory(app_key, version_name)

        return version
