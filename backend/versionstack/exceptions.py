"""Typed failures raised by the registry core.

Every failure carries a machine-readable ``code`` and an HTTP-mappable
``status_code``. Only the exception handler in ``versionstack.main`` turns
them into responses.
"""

from typing import Any


class RegistryError(Exception):
    """Base class for all registry failures."""

    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(RegistryError):
    code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Validation failed"


class UnauthorizedError(RegistryError):
    code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Authentication required"


class InvalidTokenError(RegistryError):
    code = "INVALID_TOKEN"
    status_code = 401
    default_message = "Invalid or expired token"


class ForbiddenError(RegistryError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "Access denied"


class NotFoundError(RegistryError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")


class AppNotFoundError(RegistryError):
    code = "APP_NOT_FOUND"
    status_code = 404

    def __init__(self, app_key: str | None = None):
        super().__init__(f"App '{app_key}' not found" if app_key else "App not found")


class VersionNotFoundError(RegistryError):
    code = "VERSION_NOT_FOUND"
    status_code = 404

    def __init__(self, version_id: int | str | None = None):
        super().__init__(
            f"Version '{version_id}' not found" if version_id is not None else "Version not found"
        )


class ConflictError(RegistryError):
    code = "CONFLICT"
    status_code = 409
    default_message = "Conflict"


class AlreadyExistsError(RegistryError):
    code = "ALREADY_EXISTS"
    status_code = 409

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} already exists")


class StorageError(RegistryError):
    code = "STORAGE_ERROR"
    status_code = 500
    default_message = "File storage error"


class DatabaseError(RegistryError):
    code = "DATABASE_ERROR"
    status_code = 500
    default_message = "Database error"


class InternalError(RegistryError):
    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal server error"
