"""Location API routes."""

from fastapi import APIRouter, Depends, Request

from api.v1.dependencies import get_profile_service
from api.v1.schemas.location import LocationListResponse, LocationResponse
from core.rate_limit import READ_LIMIT, limiter
from domain.services.profile_service import ProfileService

router = APIRouter(prefix="/locations", tags=["locations"])


@router.get(
    "",
    response_model=LocationListResponse,
    summary="List locations",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_locations(
    request: Request,
    service: ProfileService = Depends(get_profile_service),
) -> LocationListResponse:
    """Every location, ordered by name."""
    locations = await service.get_locations()
    return LocationListResponse(data=[LocationResponse.model_validate(loc) for loc in locations])
