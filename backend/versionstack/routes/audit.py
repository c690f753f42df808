"""Audit log API endpoints (admin only)."""

from fastapi import APIRouter, Depends, Query

from versionstack.dependencies.auth import require_admin
from versionstack.dependencies.services import get_audit_service
from versionstack.schemas import AuditLogList, AuditLogResponse, Pagination
from versionstack.services.access_control import SessionToken
from versionstack.services.audit_service import AuditService

router = APIRouter()


@router.get("", response_model=AuditLogList)
async def list_audit_logs(
    action: str | None = Query(None, description="Filter by action, e.g. version.upload"),
    entity_type: str | None = Query(None, alias="entityType", description="Filter by entity type"),
    entity_id: str | None = Query(None, alias="entityId", description="Filter by entity id"),
    limit: int | None = Query(None, ge=1, description="Page size, capped by configuration"),
    offset: int = Query(0, ge=0, description="Pagination offset"),
    _: SessionToken = Depends(require_admin),
    service: AuditService = Depends(get_audit_service),
):
    """
    List audit entries newest first.

    Args:
        action: Filter by action (optional)
        entity_type: Filter by entity type (optional)
        entity_id: Filter by entity id (optional)
        limit: Maximum entries to return
        offset: Pagination offset

    Returns:
        AuditLogList with entries and pagination
    """
    entries, total, effective_limit = await service.list(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        limit=limit,
        offset=offset,
    )
    return AuditLogList(
        data=[
            AuditLogResponse(
                id=item.entry.id,
                action=item.entry.action,
                entity_type=item.entry.entity_type,
                entity_id=item.entry.entity_id,
                actor_key_id=item.entry.actor_key_id,
                actor_key_name=item.actor_key_name,
                actor_ip=item.entry.actor_ip,
                details=item.entry.details,
                created_at=item.entry.created_at,
            )
            for item in entries
        ],
        pagination=Pagination(total=total, limit=effective_limit, offset=offset),
    )
