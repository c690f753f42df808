"""Login, API key management and the gateway file-access check."""

import logging

from fastapi import APIRouter, Depends, Header, Request

from versionstack.dependencies.auth import get_actor, require_admin
from versionstack.dependencies.services import get_api_key_service, get_client_ip
from versionstack.schemas import (
    APIKeyCreate,
    APIKeyCreated,
    APIKeyResponse,
    FileAccessResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
)
from versionstack.services.access_control import SessionToken
from versionstack.services.api_key_service import APIKeyService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    service: APIKeyService = Depends(get_api_key_service),
):
    """Exchange an API key for a session token."""
    result = await service.login(body.api_key, actor_ip=get_client_ip(request))
    return LoginResponse(token=result.token, expires_in=result.expires_in)


@router.get("/api-keys", response_model=list[APIKeyResponse])
async def list_api_keys(
    _: SessionToken = Depends(require_admin),
    service: APIKeyService = Depends(get_api_key_service),
):
    """List all API keys, active and revoked. Hashes are never returned."""
    keys = await service.list_api_keys()
    return [APIKeyResponse.model_validate(key) for key in keys]


@router.post("/api-keys", response_model=APIKeyCreated, status_code=201)
async def create_api_key(
    body: APIKeyCreate,
    request: Request,
    token: SessionToken = Depends(require_admin),
    service: APIKeyService = Depends(get_api_key_service),
):
    """
    Create a new API key.

    The plaintext key is in this response only and can never be retrieved again.
    """
    api_key, plaintext_key = await service.create_api_key(
        name=body.name,
        permission=body.permission,
        app_scope=body.app_scope,
        actor=get_actor(request, token),
    )
    return APIKeyCreated(
        id=api_key.id,
        name=api_key.name,
        permission=api_key.permission,
        app_scope=api_key.app_scope,
        is_active=api_key.is_active,
        created_at=api_key.created_at,
        last_used_at=api_key.last_used_at,
        api_key=plaintext_key,
    )


@router.delete("/api-keys/{key_id}", response_model=MessageResponse)
async def revoke_api_key(
    key_id: int,
    request: Request,
    token: SessionToken = Depends(require_admin),
    service: APIKeyService = Depends(get_api_key_service),
):
    await service.revoke_api_key(key_id, actor=get_actor(request, token))
    return MessageResponse(message="API key revoked successfully")


@router.get("/check-file-access", response_model=FileAccessResponse)
async def check_file_access(
    x_original_uri: str | None = Header(None),
    authorization: str | None = Header(None),
    service: APIKeyService = Depends(get_api_key_service),
):
    """
    Reverse-proxy auth_request target for ``/files/...`` downloads.

    Returns 200 when the download may proceed, 401 otherwise.
    """
    await service.check_file_access(x_original_uri, authorization)
    return FileAccessResponse(allowed=True)
