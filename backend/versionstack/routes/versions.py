"""Version API endpoints, mounted under /apps."""

import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from versionstack.config import settings
from versionstack.dependencies.auth import get_actor, get_optional_token, require_app_access
from versionstack.dependencies.services import get_version_service
from versionstack.schemas import (
    LatestVersionResponse,
    MessageResponse,
    SetActiveVersionRequest,
    UploadVersionResponse,
    VersionResponse,
)
from versionstack.services.access_control import SessionToken
from versionstack.services.version_service import VersionService
from versionstack.storage import spool_uploads

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{app_key}/versions", response_model=list[VersionResponse])
async def list_versions(
    app_key: str,
    _: SessionToken = Depends(require_app_access("read")),
    service: VersionService = Depends(get_version_service),
):
    """List versions newest first with their files."""
    app, versions = await service.list_versions(app_key)
    return [
        VersionResponse.build(item.version, item.files, app.app_key, app.current_version_id)
        for item in versions
    ]


@router.get("/{app_key}/latest", response_model=LatestVersionResponse)
async def get_latest_version(
    app_key: str,
    token: SessionToken | None = Depends(get_optional_token),
    service: VersionService = Depends(get_version_service),
):
    """
    Resolve the active version for update clients.

    Public apps need no token; private apps need one whose scope covers the app.
    """
    latest = await service.get_latest_version(app_key, token)
    return LatestVersionResponse.build(latest.version, latest.files, latest.app.app_key)


@router.post("/{app_key}/versions", response_model=UploadVersionResponse, status_code=201)
async def upload_version(
    app_key: str,
    request: Request,
    files: list[UploadFile] = File(default=[]),
    version_name: str | None = Form(None, alias="versionName"),
    token: SessionToken = Depends(require_app_access("write")),
    service: VersionService = Depends(get_version_service),
):
    """Upload one or more files as a new version. It becomes active immediately."""
    spooled = await spool_uploads(files, settings.tmp_upload_dir, settings.upload_chunk_size)
    result = await service.upload_version(
        app_key, version_name, spooled, actor=get_actor(request, token)
    )
    version = VersionResponse.build(
        result.version, result.files, result.app.app_key, result.version.id
    )
    return UploadVersionResponse(version=version, files=version.files)


@router.put("/{app_key}/active-version", response_model=VersionResponse)
async def set_active_version(
    app_key: str,
    body: SetActiveVersionRequest,
    request: Request,
    token: SessionToken = Depends(require_app_access("write")),
    service: VersionService = Depends(get_version_service),
):
    app, version, files = await service.set_active_version(
        app_key, body.version_id, actor=get_actor(request, token)
    )
    return VersionResponse.build(version, files, app.app_key, version.id)


@router.delete("/{app_key}/versions/{version_id}", response_model=MessageResponse)
async def delete_version(
    app_key: str,
    version_id: int,
    request: Request,
    token: SessionToken = Depends(require_app_access("write")),
    service: VersionService = Depends(get_version_service),
):
    """Delete an inactive version. The active version must be switched first."""
    await service.delete_version(app_key, version_id, actor=get_actor(request, token))
    return MessageResponse(message="Version deleted successfully")
