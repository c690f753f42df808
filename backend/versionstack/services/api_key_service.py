"""API key service: login, key management and the gateway file check."""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from urllib.parse import unquote

from versionstack.config import settings
from versionstack.exceptions import (
    InvalidTokenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from versionstack.models import APIKey
from versionstack.repositories.api_key_repository import APIKeyRepository
from versionstack.repositories.app_repository import AppRepository
from versionstack.services.access_control import SessionToken, file_download_allowed
from versionstack.services.audit_logger import SYSTEM_ACTOR, Actor, AuditLogger
from versionstack.services.tokens import TokenCodec
from versionstack.utils.log_redaction import sanitize_for_log

logger = logging.getLogger(__name__)

FILE_PATH_PREFIX = "files"
BOOTSTRAP_KEY_NAME = "Bootstrap Admin Key"


def parse_file_path(original_uri: str | None) -> str:
    """
    Extract the app key from a gateway download path.

    Only the exact shape ``/files/<appKey>/<versionName>/<fileName>`` is
    accepted, checked after percent-decoding. Empty, ``.`` and ``..``
    segments are refused because the gateway would normalize them into a
    different app's path than the one checked here.

    Raises:
        UnauthorizedError: Any other shape
    """
    path = unquote((original_uri or "").split("?", 1)[0])
    segments = path.split("/")
    if (
        len(segments) != 5
        or segments[0] != ""
        or segments[1] != FILE_PATH_PREFIX
        or any(segment in ("", ".", "..") or "\\" in segment for segment in segments[2:])
    ):
        raise UnauthorizedError("Invalid file path")
    return segments[2]


@dataclass
class LoginResult:
    token: str
    expires_in: str


class APIKeyService:
    """Service for managing API keys and session tokens."""

    KEY_PREFIX = "vs_"
    KEY_LENGTH = 32  # 32 bytes = 256 bits of entropy

    def __init__(
        self,
        api_key_repo: APIKeyRepository,
        app_repo: AppRepository,
        audit: AuditLogger,
        tokens: TokenCodec | None = None,
        admin_api_key: str | None = None,
    ):
        self.api_key_repo = api_key_repo
        self.app_repo = app_repo
        self.audit = audit
        self.tokens = tokens or TokenCodec()
        self.admin_api_key = admin_api_key if admin_api_key is not None else settings.admin_api_key

    @classmethod
    def generate_key(cls) -> str:
        """
        Generate a cryptographically secure API key.

        Format: vs_<32 bytes of URL-safe base64>
        """
        token = secrets.token_urlsafe(cls.KEY_LENGTH)
        return f"{cls.KEY_PREFIX}{token}"

    @classmethod
    def hash_key(cls, key: str) -> str:
        """
        Hash an API key using SHA256.

        Args:
            key: The plaintext API key

        Returns:
            Hexadecimal SHA256 hash of the key

        Note:
            API keys are high-entropy random tokens, not user-chosen
            passwords, so an unsalted fast hash is sufficient.
        """
        return hashlib.sha256(key.encode()).hexdigest()

    def _is_bootstrap_key(self, api_key: str) -> bool:
        if not self.admin_api_key:
            return False
        return secrets.compare_digest(api_key.encode(), self.admin_api_key.encode())

    async def login(self, api_key: str, actor_ip: str | None = None) -> LoginResult:
        """
        Exchange an API key for a session token.

        The bootstrap admin key yields a global admin token with no key id.

        Raises:
            UnauthorizedError: Unknown or revoked key
        """
        if self._is_bootstrap_key(api_key):
            token = self.tokens.issue(None, "admin", None)
            await self.audit.log(
                "auth.login",
                "auth",
                "bootstrap",
                Actor(key_id=None, ip=actor_ip),
                {"keyName": BOOTSTRAP_KEY_NAME},
            )
            logger.info("Bootstrap admin key login")
            return LoginResult(token=token, expires_in=self.tokens.expires_in)

        db_key = await self.api_key_repo.find_active_by_hash(self.hash_key(api_key))
        if not db_key:
            logger.warning(f"Failed login from {sanitize_for_log(actor_ip)}")
            await self.audit.log(
                "auth.login_failed",
                "auth",
                None,
                Actor(key_id=None, ip=actor_ip),
                {"reason": "Invalid API key"},
            )
            raise UnauthorizedError("Invalid API key")

        key_id = db_key.id
        key_name = db_key.name
        permission = db_key.permission
        app_scope = list(db_key.app_scope) if db_key.app_scope is not None else None

        async def _touch() -> None:
            await self.api_key_repo.touch_last_used(key_id)

        await self.api_key_repo.with_transaction(_touch)

        token = self.tokens.issue(key_id, permission, app_scope)
        await self.audit.log(
            "auth.login",
            "auth",
            str(key_id),
            Actor(key_id=key_id, ip=actor_ip),
            {"keyName": key_name},
        )
        return LoginResult(token=token, expires_in=self.tokens.expires_in)

    def verify_token(self, token: str) -> SessionToken:
        """Decode a session token. Raises InvalidTokenError when bad or expired."""
        return self.tokens.verify(token)

    async def list_api_keys(self) -> list[APIKey]:
        return await self.api_key_repo.find_all()

    async def create_api_key(
        self,
        name: str,
        permission: str,
        app_scope: list[str] | None = None,
        actor: Actor = SYSTEM_ACTOR,
    ) -> tuple[APIKey, str]:
        """
        Create a new API key.

        An empty scope list is stored as global access.

        Returns:
            Tuple of (APIKey model, plaintext key)
            The plaintext is returned only here and never stored.

        Raises:
            ValidationError: A scoped app key does not exist
        """
        scope = sorted(set(app_scope)) if app_scope else None
        if scope:
            existing = await self.app_repo.find_by_scope(scope)
            if len(existing) != len(scope):
                found = {app.app_key for app in existing}
                missing = [key for key in scope if key not in found]
                raise ValidationError(
                    "One or more app keys in scope do not exist",
                    details={"appScope": missing},
                )

        plaintext_key = self.generate_key()
        key_hash = self.hash_key(plaintext_key)

        async def _create() -> APIKey:
            return await self.api_key_repo.create(
                key_hash=key_hash,
                name=name,
                permission=permission,
                app_scope=scope,
                created_by_key_id=actor.key_id,
            )

        api_key = await self.api_key_repo.with_transaction(_create)
        logger.info(f"Created {permission} API key {sanitize_for_log(name)}")

        await self.audit.log(
            "api_key.create",
            "api_key",
            str(api_key.id),
            actor,
            {"name": name, "permission": permission, "appScope": scope},
        )
        return api_key, plaintext_key

    async def revoke_api_key(self, key_id: int, actor: Actor = SYSTEM_ACTOR) -> None:
        """
        Revoke an API key (soft delete). Audit history keeps referring to it.

        Raises:
            NotFoundError: Unknown key id
        """
        api_key = await self.api_key_repo.find_by_id(key_id)
        if not api_key:
            raise NotFoundError("API key")
        key_name = api_key.name

        async def _revoke() -> None:
            await self.api_key_repo.deactivate(key_id)

        await self.api_key_repo.with_transaction(_revoke)
        logger.info(f"Revoked API key {key_id}")

        await self.audit.log("api_key.revoke", "api_key", str(key_id), actor, {"name": key_name})

    async def check_file_access(self, original_uri: str | None, auth_header: str | None) -> bool:
        """
        Decide whether the gateway may serve a file download.

        Args:
            original_uri: Requested path, e.g. ``/files/my-app/1.0.0/fw.bin``
            auth_header: Raw Authorization header, if any

        Returns:
            True when access is allowed

        Raises:
            UnauthorizedError: Every denial, so the gateway sees a single status
        """
        app_key = parse_file_path(original_uri)
        app = await self.app_repo.find_by_key(app_key)
        if not app:
            raise UnauthorizedError("App not found")

        if app.is_public:
            return True

        if not auth_header:
            raise UnauthorizedError("Authentication required for private app files")

        scheme, _, credentials = auth_header.partition(" ")
        if scheme.lower() != "bearer" or not credentials.strip():
            raise UnauthorizedError("Invalid authorization header")

        try:
            token = self.tokens.verify(credentials.strip())
        except InvalidTokenError as e:
            raise UnauthorizedError("Invalid or expired token") from e

        if not file_download_allowed(app.is_public, app.app_key, token):
            raise UnauthorizedError("No access to this app")
        return True
