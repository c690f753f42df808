"""Shared repository plumbing: transactions and error translation."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from versionstack.exceptions import DatabaseError, RegistryError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseRepository:
    """Base class holding the injected session."""

    def __init__(self, db: AsyncSession):
        """
        Initialize the repository.

        Args:
            db: AsyncSession database session
        """
        self.db = db

    async def with_transaction(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run a multi-statement write as one unit.

        Commits when ``operation`` returns; on any exception rolls back and
        re-raises the original exception unchanged.
        """
        try:
            result = await operation()
            await self.db.commit()
            return result
        except Exception:
            await self.db.rollback()
            raise

    async def _execute(
        self, statement: Any, on_integrity_error: Callable[[], RegistryError] | None = None
    ):
        try:
            return await self.db.execute(statement)
        except IntegrityError as e:
            if on_integrity_error is None:
                logger.error(f"Database error: {e}")
                raise DatabaseError("Failed to execute database operation") from e
            logger.info(f"Constraint violation: {e.orig}")
            raise on_integrity_error() from e
        except SQLAlchemyError as e:
            logger.error(f"Database error: {e}")
            raise DatabaseError("Failed to execute database operation") from e

    async def _flush(self, on_conflict: Callable[[], RegistryError]) -> None:
        """Flush pending inserts, turning a unique-constraint hit into a typed conflict."""
        try:
            await self.db.flush()
        except IntegrityError as e:
            logger.info(f"Unique constraint violation: {e.orig}")
            raise on_conflict() from e
        except SQLAlchemyError as e:
            logger.error(f"Database error: {e}")
            raise DatabaseError("Failed to execute database operation") from e
