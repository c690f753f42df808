"""Audit logger service for recording mutating operations and logins."""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from versionstack.db import async_session_maker
from versionstack.repositories.audit_log_repository import AuditLogRepository
from versionstack.utils.log_redaction import redact_sensitive_data, sanitize_for_log

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """Who triggered an action: the session's key id (None for bootstrap admin) and client IP."""

    key_id: int | None = None
    ip: str | None = None


SYSTEM_ACTOR = Actor()


class AuditLogger:
    """
    Fire-and-forget audit sink.

    Each event is written in its own short session so a failing write can
    never roll back or expire the caller's work. Failures are logged, never
    raised.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] = async_session_maker):
        """
        Initialize audit logger.

        Args:
            session_factory: Factory for the sessions audit rows are written in
        """
        self.session_factory = session_factory

    async def log(
        self,
        action: str,
        entity_type: str,
        entity_id: str | None,
        actor: Actor = SYSTEM_ACTOR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Record an audit event.

        Args:
            action: Dotted action name, e.g. ``version.upload``
            entity_type: app, version, api_key or auth
            entity_id: Identifier of the affected entity
            actor: Acting key and client address
            details: Action-specific data
        """
        try:
            async with self.session_factory() as session:
                await AuditLogRepository(session).create(
                    action=action,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    actor_key_id=actor.key_id,
                    actor_ip=actor.ip,
                    details=redact_sensitive_data(details) if details else None,
                )
            logger.debug(f"Audit {action} on {entity_type} {sanitize_for_log(entity_id)}")
        except Exception as e:
            logger.error(f"Failed to write audit event {action}: {e}", exc_info=True)
