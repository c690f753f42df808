"""Pure access decisions over an already-verified session token.

Nothing here touches the database or the network; callers pass in the token
and, where needed, the app row they already loaded.
"""

from dataclasses import dataclass
from datetime import datetime

from versionstack.exceptions import ForbiddenError, UnauthorizedError
from versionstack.models.api_key import PERMISSION_LEVELS


@dataclass(frozen=True)
class SessionToken:
    """Decoded session token claims."""

    key_id: int | None
    permission: str
    app_scope: frozenset[str] | None
    expires_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.permission == "admin"


def permission_at_least(held: str, required: str) -> bool:
    """Total order read < write < admin. Unknown levels never pass."""
    held_level = PERMISSION_LEVELS.get(held, 0)
    required_level = PERMISSION_LEVELS.get(required)
    if required_level is None:
        return False
    return held_level >= required_level


def app_access_allowed(token: SessionToken, app_key: str) -> bool:
    """
    Check whether a token may act on an app.

    Admin tokens and tokens with a null (global) scope may act on any app.
    An empty scope allows nothing.
    """
    if token.is_admin or token.app_scope is None:
        return True
    return app_key in token.app_scope


def latest_version_read_allowed(is_public: bool, app_key: str, token: SessionToken | None) -> bool:
    if is_public:
        return True
    return token is not None and app_access_allowed(token, app_key)


def file_download_allowed(is_public: bool, app_key: str, token: SessionToken | None) -> bool:
    """Gateway file check; same rule as reading the latest version."""
    return latest_version_read_allowed(is_public, app_key, token)


def ensure_latest_version_readable(
    is_public: bool, app_key: str, token: SessionToken | None
) -> None:
    """
    Raise the matching failure when a latest-version read is not allowed.

    Raises:
        UnauthorizedError: Private app and no token
        ForbiddenError: Token present but the app is outside its scope
    """
    if is_public:
        return
    if token is None:
        raise UnauthorizedError("Authentication required for private apps")
    if not app_access_allowed(token, app_key):
        raise ForbiddenError(f"Access denied to app '{app_key}'")


def visible_scope(token: SessionToken) -> frozenset[str] | None:
    """App keys a token may list; None means every app."""
    if token.is_admin:
        return None
    return token.app_scope
