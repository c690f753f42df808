"""Authentication and authorization dependencies for FastAPI endpoints."""

from collections.abc import Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from versionstack.dependencies.services import get_client_ip, get_token_codec
from versionstack.exceptions import ForbiddenError, UnauthorizedError
from versionstack.services.access_control import (
    SessionToken,
    app_access_allowed,
    permission_at_least,
)
from versionstack.services.audit_logger import Actor
from versionstack.services.tokens import TokenCodec

security = HTTPBearer(auto_error=False)


async def get_optional_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    tokens: TokenCodec = Depends(get_token_codec),
) -> SessionToken | None:
    """
    Decode the bearer token when one is sent.

    A malformed or expired token is still an error; only a missing one
    yields None.

    Raises:
        InvalidTokenError: Token present but invalid or expired
    """
    if credentials is None:
        return None
    return tokens.verify(credentials.credentials)


async def require_token(token: SessionToken | None = Depends(get_optional_token)) -> SessionToken:
    """
    Dependency that requires a valid session token.

    Raises:
        UnauthorizedError: No bearer token
    """
    if token is None:
        raise UnauthorizedError("Authentication required")
    return token


def require_permission(level: str) -> Callable:
    """
    Build a dependency that requires at least ``level`` (read < write < admin).

    Raises:
        ForbiddenError: Token permission is below ``level``
    """

    async def _check(token: SessionToken = Depends(require_token)) -> SessionToken:
        if not permission_at_least(token.permission, level):
            raise ForbiddenError(f"{level.capitalize()} permission required")
        return token

    return _check


def require_app_access(level: str) -> Callable:
    """
    Build a dependency that requires ``level`` and the ``app_key`` path
    parameter to be inside the token's scope.

    Raises:
        ForbiddenError: Permission too low or app outside scope
    """

    async def _check(
        app_key: str, token: SessionToken = Depends(require_permission(level))
    ) -> SessionToken:
        if not app_access_allowed(token, app_key):
            raise ForbiddenError(f"Access denied to app '{app_key}'")
        return token

    return _check


require_read = require_permission("read")
require_write = require_permission("write")
require_admin = require_permission("admin")


def get_actor(request: Request, token: SessionToken | None) -> Actor:
    return Actor(key_id=token.key_id if token else None, ip=get_client_ip(request))
