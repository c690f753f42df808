"""Database engine, session factory and schema bootstrap."""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from versionstack.config import settings

logger = logging.getLogger(__name__)


def _is_sqlite(url: str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def _is_file_sqlite(url: str) -> bool:
    database = make_url(url).database
    return _is_sqlite(url) and bool(database) and database != ":memory:"


def enable_sqlite_foreign_keys(async_engine: AsyncEngine, wal: bool = False) -> None:
    """
    Apply per-connection SQLite pragmas.

    Foreign keys are off by default in SQLite and the apps/versions pointer
    relies on them. WAL is only meaningful for file databases.
    """

    @event.listens_for(async_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if wal:
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA busy_timeout=30000")
        cursor.close()


def ensure_database_directory(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    if not _is_file_sqlite(url):
        return
    db_dir = os.path.dirname(make_url(url).database)
    if db_dir and not os.path.isdir(db_dir):
        os.makedirs(db_dir, exist_ok=True)
        logger.info(f"Created database directory: {db_dir}")


engine = create_async_engine(
    settings.database_url,
    echo=settings.log_level.upper() == "DEBUG",
    # 30 second lock timeout for concurrent SQLite writers
    connect_args={"check_same_thread": False, "timeout": 30.0}
    if _is_sqlite(settings.database_url)
    else {},
    pool_pre_ping=True,
)

if _is_sqlite(settings.database_url):
    enable_sqlite_foreign_keys(engine, wal=_is_file_sqlite(settings.database_url))

async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    """Base class for all database models."""


@asynccontextmanager
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session outside of a request and close it afterwards."""
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """Create the database directory and every table that is missing."""
    # Models register themselves on Base.metadata when imported
    import versionstack.models  # noqa: F401

    ensure_database_directory(settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized successfully")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting database sessions.

    Yields:
        Database session
    """
    async with db_session() as session:
        yield session
