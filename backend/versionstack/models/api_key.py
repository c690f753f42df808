"""API Key model for secure API authentication."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from versionstack.db import Base
from versionstack.utils.timezone import get_now

PERMISSION_LEVELS = {"read": 1, "write": 2, "admin": 3}


class APIKey(Base):
    """API Key for programmatic access with a permission level and optional app scope."""

    __tablename__ = "api_keys"
    __table_args__ = (
        CheckConstraint("permission IN ('read', 'write', 'admin')", name="ck_api_keys_permission"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key_hash: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True
    )  # SHA256 hash, plaintext is never stored
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    permission: Mapped[str] = mapped_column(String(10), nullable=False)

    # None = global access. Otherwise a non-empty list of app keys.
    app_scope: Mapped[list[str] | None] = mapped_column(JSON(none_as_null=True), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=get_now, nullable=False)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_by_key_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("api_keys.id"), nullable=True
    )
