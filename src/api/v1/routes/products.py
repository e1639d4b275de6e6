"""Product API routes."""

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import OptionalUser
from api.v1.dependencies import get_profile_service
from api.v1.schemas.product import ProductListResponse, ProductResponse
from core.rate_limit import READ_LIMIT, limiter
from domain.services.profile_service import ProfileService

router = APIRouter(prefix="/products", tags=["products"])


@router.get(
    "",
    response_model=ProductListResponse,
    summary="List the signed-in user's products",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_products(
    request: Request,
    user: OptionalUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProductListResponse:
    """Products owned by the caller. Without a session the list is empty."""
    products = await service.get_products(user.id if user else None)
    return ProductListResponse(data=[ProductResponse.model_validate(p) for p in products])
