"""Audit log repository for centralized audit queries."""

from datetime import datetime
from typing import Any

from sqlalchemy import func, select

from versionstack.models import APIKey, AuditLog
from versionstack.repositories.base import BaseRepository
from versionstack.utils.timezone import get_now


class AuditLogRepository(BaseRepository):
    """Repository for AuditLog model."""

    async def create(
        self,
        action: str,
        entity_type: str,
        entity_id: str | None = None,
        actor_key_id: int | None = None,
        actor_ip: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> AuditLog:
        """
        Create a new audit entry and commit it on its own.

        Args:
            action: Dotted action name (app.create, version.upload, ...)
            entity_type: app, version, api_key or auth
            entity_id: App key, ``appKey/versionName`` or key id
            actor_key_id: Key that performed the action, None for bootstrap admin
            actor_ip: Client address
            details: Action-specific data

        Returns:
            Created AuditLog instance
        """
        entry = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_key_id=actor_key_id,
            actor_ip=actor_ip,
            details=details,
            created_at=get_now(),
        )
        self.db.add(entry)
        await self.db.commit()
        return entry

    @staticmethod
    def _apply_filters(query, action: str | None, entity_type: str | None, entity_id: str | None):
        if action:
            query = query.where(AuditLog.action == action)
        if entity_type:
            query = query.where(AuditLog.entity_type == entity_type)
        if entity_id:
            query = query.where(AuditLog.entity_id == entity_id)
        return query

    async def find_with_filters(
        self,
        limit: int,
        offset: int = 0,
        action: str | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
    ) -> tuple[list[tuple[AuditLog, str | None]], int]:
        """
        Get audit entries newest first, with the acting key's name when it still exists.

        Returns:
            Tuple of ([(entry, actor key name)], total count)
        """
        query = select(AuditLog, APIKey.name).outerjoin(APIKey, APIKey.id == AuditLog.actor_key_id)
        query = self._apply_filters(query, action, entity_type, entity_id)
        query = query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())

        count_query = self._apply_filters(
            select(func.count(AuditLog.id)), action, entity_type, entity_id
        )
        total_result = await self._execute(count_query)
        total = total_result.scalar() or 0

        result = await self._execute(query.limit(limit).offset(offset))
        rows = [(entry, actor_name) for entry, actor_name in result.all()]
        return rows, total

    async def count_since(self, action: str, since: datetime) -> int:
        result = await self._execute(
            select(func.count(AuditLog.id)).where(
                AuditLog.action == action, AuditLog.created_at >= since
            )
        )
        return result.scalar() or 0
