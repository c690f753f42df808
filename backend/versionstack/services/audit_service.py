"""Read side of the audit log."""

from dataclasses import dataclass

from versionstack.config import settings
from versionstack.models import AuditLog
from versionstack.repositories.audit_log_repository import AuditLogRepository


@dataclass
class AuditEntry:
    entry: AuditLog
    actor_key_name: str | None


class AuditService:
    """Lists audit entries for administrators."""

    def __init__(self, audit_repo: AuditLogRepository):
        self.audit_repo = audit_repo

    async def list(
        self,
        action: str | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> tuple[list[AuditEntry], int, int]:
        """
        List audit entries newest first.

        Limit falls back to the configured default and is capped at the
        configured maximum.

        Returns:
            Tuple of (entries, total matching, effective limit)
        """
        if limit is None or limit <= 0:
            limit = settings.audit_default_limit
        limit = min(limit, settings.audit_max_limit)
        offset = max(offset, 0)

        rows, total = await self.audit_repo.find_with_filters(
            limit=limit,
            offset=offset,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        return [AuditEntry(entry=entry, actor_key_name=name) for entry, name in rows], total, limit
