"""Audit log model for tracking mutating operations and logins."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from versionstack.db import Base
from versionstack.utils.timezone import get_now


class AuditLog(Base):
    """Audit trail entry."""

    __tablename__ = "audit_log"
    __table_args__ = (
        Index("ix_audit_log_action", "action"),
        Index("ix_audit_log_entity", "entity_type", "entity_id"),
        Index("ix_audit_log_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    action: Mapped[str] = mapped_column(String(50), nullable=False)  # app.create, version.upload, ...
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)  # app, version, api_key, auth
    entity_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Plain column, not a foreign key: audit rows outlive revoked keys
    actor_key_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    actor_ip: Mapped[str | None] = mapped_column(String(64), nullable=True)

    details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=get_now, nullable=False)
