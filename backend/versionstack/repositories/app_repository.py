"""App repository for centralized app queries."""

from sqlalchemy import select, update
from sqlalchemy import delete as sql_delete

from versionstack.exceptions import AlreadyExistsError
from versionstack.models import App
from versionstack.repositories.base import BaseRepository


class AppRepository(BaseRepository):
    """Repository for App model."""

    async def find_all(self) -> list[App]:
        """Get all apps ordered by display name."""
        result = await self._execute(select(App).order_by(App.display_name, App.id))
        return list(result.scalars().all())

    async def find_by_scope(self, app_keys: list[str] | set[str] | frozenset[str]) -> list[App]:
        """
        Get the apps whose key is in ``app_keys``.

        Args:
            app_keys: Allowed app keys; empty means no apps

        Returns:
            Matching apps ordered by display name
        """
        if not app_keys:
            return []
        result = await self._execute(
            select(App).where(App.app_key.in_(list(app_keys))).order_by(App.display_name, App.id)
        )
        return list(result.scalars().all())

    async def find_by_key(self, app_key: str) -> App | None:
        result = await self._execute(select(App).where(App.app_key == app_key))
        return result.scalar_one_or_none()

    async def find_by_id(self, app_id: int) -> App | None:
        result = await self._execute(select(App).where(App.id == app_id))
        return result.scalar_one_or_none()

    async def find_current_version_id(self, app_id: int) -> int | None:
        """Read the active pointer from the database, bypassing any loaded App."""
        result = await self._execute(select(App.current_version_id).where(App.id == app_id))
        return result.scalar_one_or_none()

    async def exists(self, app_key: str) -> bool:
        """Advisory pre-check; the unique index on app_key is the real guard."""
        result = await self._execute(select(App.id).where(App.app_key == app_key))
        return result.scalar_one_or_none() is not None

    async def create(self, app_key: str, display_name: str, is_public: bool) -> App:
        """
        Insert a new app.

        Raises:
            AlreadyExistsError: If another app with this key was inserted first
        """
        app = App(app_key=app_key, display_name=display_name, is_public=is_public)
        self.db.add(app)
        await self._flush(lambda: AlreadyExistsError("App with this key"))
        return app

    async def update(
        self, app: App, display_name: str | None = None, is_public: bool | None = None
    ) -> App:
        """Persist only the supplied fields."""
        if display_name is not None:
            app.display_name = display_name
        if is_public is not None:
            app.is_public = is_public
        await self._flush(lambda: AlreadyExistsError("App with this key"))
        return app

    async def set_current_version(self, app_id: int, version_id: int | None) -> None:
        await self._execute(
            update(App).where(App.id == app_id).values(current_version_id=version_id)
        )

    async def clear_current_version(self, app_id: int) -> None:
        await self.set_current_version(app_id, None)

    async def delete(self, app_id: int) -> None:
        await self._execute(sql_delete(App).where(App.id == app_id))
