"""App lifecycle: register, update, list and delete apps."""

import logging
from dataclasses import dataclass

from versionstack.exceptions import AlreadyExistsError, AppNotFoundError
from versionstack.models import App
from versionstack.repositories.app_repository import AppRepository
from versionstack.repositories.version_repository import VersionRepository
from versionstack.services.audit_logger import SYSTEM_ACTOR, Actor, AuditLogger
from versionstack.storage import ContentStore
from versionstack.utils.log_redaction import sanitize_for_log

logger = logging.getLogger(__name__)


@dataclass
class DeletedApp:
    app_key: str
    versions_count: int


class AppService:
    """Service for managing apps."""

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

    async def list_apps(self, scope: frozenset[str] | None = None) -> list[App]:
        """
        List apps visible to a scope.

        Args:
            scope: None for every app, otherwise the allowed app keys

        Returns:
            Apps ordered by display name
        """
        if scope is None:
            return await self.app_repo.find_all()
        return await self.app_repo.find_by_scope(scope)

    async def get_app(self, app_key: str) -> App:
        app = await self.app_repo.find_by_key(app_key)
        if not app:
            raise AppNotFoundError(app_key)
        return app

    async def create_app(
        self,
        app_key: str,
        display_name: str | None = None,
        is_public: bool = False,
        actor: Actor = SYSTEM_ACTOR,
    ) -> App:
        """
        Register a new app.

        The pre-check gives a friendly error; the unique index on app_key
        catches the race between check and insert.

        Raises:
            AlreadyExistsError: If the key is taken
        """
        if await self.app_repo.exists(app_key):
            raise AlreadyExistsError("App with this key")

        name = display_name.strip() if display_name and display_name.strip() else app_key

        async def _create() -> App:
            return await self.app_repo.create(app_key, name, is_public)

        app = await self.app_repo.with_transaction(_create)
        logger.info(f"Created app {sanitize_for_log(app_key)}")

        await self.audit.log(
            "app.create",
            "app",
            app_key,
            actor,
            {"displayName": app.display_name, "isPublic": app.is_public},
        )
        return app

    async def update_app(
        self,
        app_key: str,
        display_name: str | None = None,
        is_public: bool | None = None,
        actor: Actor = SYSTEM_ACTOR,
    ) -> App:
        """Update only the supplied fields."""
        app = await self.get_app(app_key)

        async def _update() -> App:
            return await self.app_repo.update(app, display_name=display_name, is_public=is_public)

        app = await self.app_repo.with_transaction(_update)

        changes = {}
        if display_name is not None:
            changes["displayName"] = display_name
        if is_public is not None:
            changes["isPublic"] = is_public
        await self.audit.log("app.update", "app", app_key, actor, changes)
        return app

    async def delete_app(self, app_key: str, actor: Actor = SYSTEM_ACTOR) -> DeletedApp:
        """
        Delete an app, its versions, their files and its content-store subtree.

        Database rows go in one transaction. The subtree is removed only
        after that commits, since file removal cannot be rolled back.

        Raises:
            AppNotFoundError: If the app does not exist
            StorageError: If the subtree could not be removed after commit
        """
        app = await self.get_app(app_key)
        app_id = app.id

        async def _delete() -> int:
            versions_count = await self.version_repo.count_by_app_id(app_id)
            # The app points at one of its versions; break that link before deleting them
            await self.app_repo.clear_current_version(app_id)
            await self.version_repo.delete_files_by_app_id(app_id)
            await self.version_repo.delete_by_app_id(app_id)
            await self.app_repo.delete(app_id)
            return versions_count

        versions_count = await self.app_repo.with_transaction(_delete)
        logger.info(f"Deleted app {sanitize_for_log(app_key)} with {versions_count} versions")

        await self.audit.log(
            "app.delete", "app", app_key, actor, {"versionsCount": versions_count}
        )

        await self.content_store.delete_app_directory(app_key)

        return DeletedApp(app_key=app_key, versions_count=versions_count)
