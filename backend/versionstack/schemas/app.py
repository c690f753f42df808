"""Pydantic schemas for apps."""

from datetime import datetime

from pydantic import Field, field_validator

from versionstack.exceptions import ValidationError
from versionstack.schemas.common import CamelModel
from versionstack.validators import (
    APP_KEY_MAX_LENGTH,
    DISPLAY_NAME_MAX_LENGTH,
    sanitize_display_name,
    validate_app_key,
)


class AppCreate(CamelModel):
    """Request schema for registering an app."""

    app_key: str = Field(..., min_length=1, max_length=APP_KEY_MAX_LENGTH)
    display_name: str | None = Field(None, max_length=DISPLAY_NAME_MAX_LENGTH)
    is_public: bool = False

    @field_validator("app_key")
    @classmethod
    def check_app_key(cls, value: str) -> str:
        try:
            return validate_app_key(value)
        except ValidationError as e:
            raise ValueError(e.message) from e

    @field_validator("display_name")
    @classmethod
    def clean_display_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return sanitize_display_name(value) or None


class AppUpdate(CamelModel):
    """Request schema for updating an app. Omitted fields are left untouched."""

    display_name: str | None = Field(None, min_length=1, max_length=DISPLAY_NAME_MAX_LENGTH)
    is_public: bool | None = None

    @field_validator("display_name")
    @classmethod
    def clean_display_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = sanitize_display_name(value)
        if not cleaned:
            raise ValueError("Display name cannot be empty")
        return cleaned


class AppResponse(CamelModel):
    """Response schema for an app."""

    id: int
    app_key: str
    display_name: str | None
    current_version_id: int | None
    is_public: bool
    created_at: datetime


class DeletedAppSummary(CamelModel):
    app_key: str
    versions_count: int


class DeleteAppResponse(CamelModel):
    message: str = "App and all versions deleted successfully"
    deleted: DeletedAppSummary
