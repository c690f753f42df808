"""Pydantic schemas for login and API key management."""

from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from versionstack.exceptions import ValidationError
from versionstack.schemas.common import CamelModel
from versionstack.validators import sanitize_display_name, validate_app_key

Permission = Literal["read", "write", "admin"]


class LoginRequest(CamelModel):
    api_key: str = Field(..., min_length=1, max_length=128)


class LoginResponse(CamelModel):
    token: str
    expires_in: str


class APIKeyCreate(CamelModel):
    """Request schema for creating a new API key."""

    name: str = Field(..., min_length=1, max_length=100, description="Human-readable key name")
    permission: Permission
    app_scope: list[str] | None = Field(
        None, description="App keys this key may act on; omit for global access"
    )

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: str) -> str:
        cleaned = sanitize_display_name(value)
        if not cleaned:
            raise ValueError("Name cannot be empty")
        return cleaned

    @field_validator("app_scope")
    @classmethod
    def check_app_scope(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        try:
            return [validate_app_key(key) for key in value]
        except ValidationError as e:
            raise ValueError(e.message) from e


class APIKeyResponse(CamelModel):
    """Response schema for an API key (never includes the hash)."""

    id: int
    name: str
    permission: Permission
    app_scope: list[str] | None
    is_active: bool
    created_at: datetime
    last_used_at: datetime | None


class APIKeyCreated(APIKeyResponse):
    """Response when a key is first created. The plaintext is shown only here."""

    api_key: str


class FileAccessResponse(CamelModel):
    allowed: bool
