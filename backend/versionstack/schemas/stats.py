"""Pydantic schemas for dashboard stats."""

from versionstack.schemas.common import CamelModel


class StatsResponse(CamelModel):
    total_apps: int
    total_versions: int
    total_storage_bytes: int
    apps_with_active_version: int
    recent_uploads: int
