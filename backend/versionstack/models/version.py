"""Version and VersionFile models."""

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from versionstack.db import Base
from versionstack.utils.timezone import get_now


class Version(Base):
    """Named, immutable snapshot of one or more files belonging to an app."""

    __tablename__ = "versions"
    __table_args__ = (
        UniqueConstraint("app_id", "version_name", name="uq_versions_app_version"),
        Index("ix_versions_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    app_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("apps.id"), nullable=False, index=True
    )
    version_name: Mapped[str] = mapped_column(String(50), nullable=False)

    # Legacy flag, always written as True. App.current_version_id is authoritative.
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=get_now, nullable=False)


class VersionFile(Base):
    """One stored file of a version."""

    __tablename__ = "version_files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    version_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("versions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_hash: Mapped[str] = mapped_column(String(64), nullable=False, index=True)  # SHA256 hex
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=get_now, nullable=False)
