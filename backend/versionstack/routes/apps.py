"""App API endpoints."""

from fastapi import APIRouter, Depends, Request

from versionstack.dependencies.auth import get_actor, require_app_access, require_read, require_write
from versionstack.dependencies.services import get_app_service
from versionstack.schemas import AppCreate, AppResponse, AppUpdate, DeleteAppResponse
from versionstack.schemas.app import DeletedAppSummary
from versionstack.services.access_control import SessionToken, visible_scope
from versionstack.services.app_service import AppService

router = APIRouter()


@router.get("", response_model=list[AppResponse])
async def list_apps(
    token: SessionToken = Depends(require_read),
    service: AppService = Depends(get_app_service),
):
    """List the apps the caller's scope covers, ordered by display name."""
    apps = await service.list_apps(visible_scope(token))
    return [AppResponse.model_validate(app) for app in apps]


@router.get("/{app_key}", response_model=AppResponse)
async def get_app(
    app_key: str,
    _: SessionToken = Depends(require_app_access("read")),
    service: AppService = Depends(get_app_service),
):
    return AppResponse.model_validate(await service.get_app(app_key))


@router.post("", response_model=AppResponse, status_code=201)
async def create_app(
    body: AppCreate,
    request: Request,
    token: SessionToken = Depends(require_write),
    service: AppService = Depends(get_app_service),
):
    app = await service.create_app(
        body.app_key,
        display_name=body.display_name,
        is_public=body.is_public,
        actor=get_actor(request, token),
    )
    return AppResponse.model_validate(app)


@router.put("/{app_key}", response_model=AppResponse)
async def update_app(
    app_key: str,
    body: AppUpdate,
    request: Request,
    token: SessionToken = Depends(require_app_access("write")),
    service: AppService = Depends(get_app_service),
):
    """Update display name and/or visibility. Omitted fields are left untouched."""
    app = await service.update_app(
        app_key,
        display_name=body.display_name,
        is_public=body.is_public,
        actor=get_actor(request, token),
    )
    return AppResponse.model_validate(app)


@router.delete("/{app_key}", response_model=DeleteAppResponse)
async def delete_app(
    app_key: str,
    request: Request,
    token: SessionToken = Depends(require_app_access("write")),
    service: AppService = Depends(get_app_service),
):
    """Delete an app with all of its versions and stored files."""
    deleted = await service.delete_app(app_key, actor=get_actor(request, token))
    return DeleteAppResponse(
        deleted=DeletedAppSummary(app_key=deleted.app_key, versions_count=deleted.versions_count)
    )
