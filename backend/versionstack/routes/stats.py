"""Dashboard statistics endpoint."""

from fastapi import APIRouter, Depends

from versionstack.dependencies.auth import require_read
from versionstack.dependencies.services import get_stats_service
from versionstack.schemas import StatsResponse
from versionstack.services.access_control import SessionToken
from versionstack.services.stats_service import StatsService

router = APIRouter()


@router.get("", response_model=StatsResponse)
async def get_stats(
    _: SessionToken = Depends(require_read),
    service: StatsService = Depends(get_stats_service),
):
    stats = await service.get_stats()
    return StatsResponse.model_validate(stats)
