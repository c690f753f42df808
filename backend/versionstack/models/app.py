"""App model: a registered namespace owning versions."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from versionstack.db import Base
from versionstack.utils.timezone import get_now


class App(Base):
    """Registered application identified by an immutable app key."""

    __tablename__ = "apps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    app_key: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Authoritative "active version" pointer. use_alter breaks the apps <-> versions cycle.
    current_version_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("versions.id", use_alter=True, name="fk_apps_current_version_id"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=get_now, nullable=False)
