"""Session token encoding and verification (HS256 JWT)."""

import logging
from datetime import UTC, datetime, timedelta

from authlib.jose import JoseError, JsonWebToken

from versionstack.config import settings
from versionstack.exceptions import InvalidTokenError
from versionstack.services.access_control import SessionToken

logger = logging.getLogger(__name__)


class TokenCodec:
    """Issues and verifies stateless session tokens."""

    def __init__(
        self,
        secret: str | None = None,
        algorithm: str | None = None,
        expire_hours: int | None = None,
    ):
        self.secret = secret or settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm
        self.expire_hours = expire_hours if expire_hours is not None else settings.jwt_expire_hours
        # Restrict accepted algorithms so "none" or RS/HS confusion cannot slip through
        self._jwt = JsonWebToken([self.algorithm])

    @property
    def expires_in(self) -> str:
        return f"{self.expire_hours}h"

    def issue(
        self, key_id: int | None, permission: str, app_scope: list[str] | None
    ) -> str:
        now = datetime.now(UTC)
        payload = {
            "keyId": key_id,
            "permission": permission,
            "appScope": sorted(app_scope) if app_scope is not None else None,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(hours=self.expire_hours)).timestamp()),
        }
        encoded = self._jwt.encode({"alg": self.algorithm}, payload, self.secret)
        return encoded.decode("utf-8") if isinstance(encoded, bytes) else encoded

    def verify(self, token: str) -> SessionToken:
        """
        Decode a token and check its signature and expiry.

        Raises:
            InvalidTokenError: Bad signature, malformed payload or expired
        """
        try:
            claims = self._jwt.decode(token, self.secret)
            claims.validate()
        except JoseError as e:
            logger.debug(f"Rejected session token: {e}")
            raise InvalidTokenError() from e
        except ValueError as e:
            logger.debug(f"Malformed session token: {e}")
            raise InvalidTokenError() from e

        permission = claims.get("permission")
        if permission not in ("read", "write", "admin"):
            raise InvalidTokenError()

        scope = claims.get("appScope")
        if scope is not None and not isinstance(scope, list):
            raise InvalidTokenError()

        exp = claims.get("exp")
        return SessionToken(
            key_id=claims.get("keyId"),
            permission=permission,
            app_scope=frozenset(scope) if scope is not None else None,
            expires_at=datetime.fromtimestamp(exp, UTC) if exp else None,
        )
