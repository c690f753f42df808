"""API key repository."""

from sqlalchemy import select, update

from versionstack.exceptions import AlreadyExistsError
from versionstack.models import APIKey
from versionstack.repositories.base import BaseRepository
from versionstack.utils.timezone import get_now


class APIKeyRepository(BaseRepository):
    """Repository for APIKey model."""

    async def find_active_by_hash(self, key_hash: str) -> APIKey | None:
        """
        Look up an active key by the SHA256 hash of its plaintext.

        Args:
            key_hash: Hex digest of the presented key

        Returns:
            APIKey if active and matching, None otherwise
        """
        result = await self._execute(
            select(APIKey).where(APIKey.key_hash == key_hash, APIKey.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, key_id: int) -> APIKey | None:
        result = await self._execute(select(APIKey).where(APIKey.id == key_id))
        return result.scalar_one_or_none()

    async def find_all(self) -> list[APIKey]:
        """All keys, newest first. Hashes never leave this layer via to_dict()."""
        result = await self._execute(select(APIKey).order_by(APIKey.created_at.desc(), APIKey.id.desc()))
        return list(result.scalars().all())

    async def create(
        self,
        key_hash: str,
        name: str,
        permission: str,
        app_scope: list[str] | None,
        created_by_key_id: int | None,
    ) -> APIKey:
        api_key = APIKey(
            key_hash=key_hash,
            name=name,
            permission=permission,
            app_scope=app_scope,
            is_active=True,
            created_by_key_id=created_by_key_id,
        )
        self.db.add(api_key)
        await self._flush(lambda: AlreadyExistsError("API key"))
        return api_key

    async def touch_last_used(self, key_id: int) -> None:
        await self._execute(
            update(APIKey).where(APIKey.id == key_id).values(last_used_at=get_now())
        )

    async def deactivate(self, key_id: int) -> None:
        await self._execute(update(APIKey).where(APIKey.id == key_id).values(is_active=False))
