"""Pydantic schemas for the audit log API."""

from datetime import datetime
from typing import Any

from versionstack.schemas.common import CamelModel


class AuditLogResponse(CamelModel):
    id: int
    action: str
    entity_type: str
    entity_id: str | None
    actor_key_id: int | None
    actor_key_name: str | None
    actor_ip: str | None
    details: dict[str, Any] | None
    created_at: datetime


class Pagination(CamelModel):
    total: int
    limit: int
    offset: int


class AuditLogList(CamelModel):
    """Paginated audit log response."""

    data: list[AuditLogResponse]
    pagination: Pagination
