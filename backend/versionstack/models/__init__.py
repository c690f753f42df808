"""Database models for VersionStack."""

from versionstack.models.api_key import APIKey
from versionstack.models.app import App
from versionstack.models.audit_log import AuditLog
from versionstack.models.version import Version, VersionFile

__all__ = [
    "APIKey",
    "App",
    "AuditLog",
    "Version",
    "VersionFile",
]
