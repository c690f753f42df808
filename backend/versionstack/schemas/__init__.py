"""Pydantic schemas for API requests and responses."""

from versionstack.schemas.app import AppCreate, AppResponse, AppUpdate, DeleteAppResponse
from versionstack.schemas.audit import AuditLogList, AuditLogResponse, Pagination
from versionstack.schemas.auth import (
    APIKeyCreate,
    APIKeyCreated,
    APIKeyResponse,
    FileAccessResponse,
    LoginRequest,
    LoginResponse,
)
from versionstack.schemas.common import CamelModel, ErrorResponse, MessageResponse
from versionstack.schemas.stats import StatsResponse
from versionstack.schemas.version import (
    LatestVersionResponse,
    SetActiveVersionRequest,
    UploadVersionResponse,
    VersionFileResponse,
    VersionResponse,
)

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "MessageResponse",
    "AppCreate",
    "AppUpdate",
    "AppResponse",
    "DeleteAppResponse",
    "VersionResponse",
    "VersionFileResponse",
    "LatestVersionResponse",
    "UploadVersionResponse",
    "SetActiveVersionRequest",
    "LoginRequest",
    "LoginResponse",
    "APIKeyCreate",
    "APIKeyResponse",
    "APIKeyCreated",
    "FileAccessResponse",
    "AuditLogResponse",
    "AuditLogList",
    "Pagination",
    "StatsResponse",
]
