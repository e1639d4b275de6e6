"""Profile page API routes."""

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import CurrentUser, OptionalUser
from api.v1.clipboard import ResponseClipboard, resolve_origin
from api.v1.dependencies import (
    get_profile_service,
    get_profile_view_service,
    notify_profile_update_errors,
)
from api.v1.schemas.common import ErrorResponse, NotificationResponse
from api.v1.schemas.location import LocationResponse
from api.v1.schemas.product import ProductResponse
from api.v1.schemas.profile import (
    ImageFailureResponse,
    ImageLink,
    ProfileDetailResponse,
    ProfileFormResponse,
    ProfileFormValues,
    ProfilePageResponse,
    ProfileResponse,
    ProfileUpdate,
    ProfileUpdateResponse,
    ShareLinkResponse,
    ViewStateResponse,
    image_response,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.profile_view import ImageKind, ProfileViewState
from domain.services.profile_service import ProfileService, ProfileUpdateResult
from domain.services.profile_view_service import ProfileViewService

router = APIRouter(prefix="/profile", tags=["profile"])

MUTATION_ERRORS = {
    401: {"model": ErrorResponse, "description": "No active session"},
    403: {"model": ErrorResponse, "description": "Username/phone changed within the cooldown"},
    422: {"model": ErrorResponse, "description": "Invalid field values"},
    502: {"model": ErrorResponse, "description": "Backend rejected the update"},
}


def _view_state(state: ProfileViewState) -> ViewStateResponse:
    return ViewStateResponse(mode=state.mode, controls=list(state.controls))


def _update_response(result: ProfileUpdateResult) -> ProfileUpdateResponse:
    return ProfileUpdateResponse(
        data=ProfileResponse.model_validate(result.profile),
        notification=NotificationResponse.from_toast(result.toast),
    )


@router.get(
    "",
    response_model=ProfileDetailResponse,
    summary="Get the signed-in user's profile",
    responses={401: {"model": ErrorResponse, "description": "No active session"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_profile(
    request: Request,
    user: OptionalUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Profile row with avatar/cover links rewritten for direct display."""
    profile = await service.get_profile(user.id if user else None)
    return ProfileDetailResponse(data=ProfileResponse.model_validate(profile))


@router.get(
    "/page",
    response_model=ProfilePageResponse,
    summary="Load the whole profile page",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_profile_page(
    request: Request,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
    view_service: ProfileViewService = Depends(get_profile_view_service),
) -> ProfilePageResponse:
    """
    Profile, products and locations fetched concurrently, plus the view
    mode, its controls and the resolved avatar/cover images.
    """
    page = await service.get_page(user.id)
    state = view_service.get_state(user.id)
    images = view_service.render_images(user.id, page.profile)

    return ProfilePageResponse(
        profile=ProfileResponse.model_validate(page.profile),
        products=[ProductResponse.model_validate(p) for p in page.products],
        locations=[LocationResponse.model_validate(loc) for loc in page.locations],
        view=_view_state(state),
        images={kind: image_response(image) for kind, image in images.items()},
    )


@router.get(
    "/form",
    response_model=ProfileFormResponse,
    summary="Edit dialog defaults",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_profile_form(
    request: Request,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileFormResponse:
    """Current values for the edit-profile dialog."""
    profile = await service.get_profile(user.id)
    return ProfileFormResponse(data=ProfileFormValues.from_profile(profile))


@router.put(
    "",
    response_model=ProfileUpdateResponse,
    summary="Update the profile",
    responses=MUTATION_ERRORS,
    dependencies=[Depends(notify_profile_update_errors)],
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_profile(
    request: Request,
    body: ProfileUpdate,
    user: OptionalUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileUpdateResponse:
    """
    Write every field. Changing username or phone is allowed only when the
    backend's cooldown check passes; the change time is then recorded.
    """
    result = await service.update_profile(user.id if user else None, body.to_values())
    return _update_response(result)


@router.put(
    "/images/{kind}",
    response_model=ProfileUpdateResponse,
    summary="Replace avatar or cover with a pasted link",
    responses=MUTATION_ERRORS,
    dependencies=[Depends(notify_profile_update_errors)],
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def replace_image(
    request: Request,
    kind: ImageKind,
    body: ImageLink,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
    view_service: ProfileViewService = Depends(get_profile_view_service),
) -> ProfileUpdateResponse:
    """Shared-drive links are stored in their direct-view form."""
    result = await service.replace_image(user.id, kind, body.url)
    view_service.clear_image_failure(user.id, kind)
    return _update_response(result)


@router.delete(
    "/images/{kind}",
    response_model=ProfileUpdateResponse,
    summary="Remove avatar or cover",
    responses=MUTATION_ERRORS,
    dependencies=[Depends(notify_profile_update_errors)],
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def remove_image(
    request: Request,
    kind: ImageKind,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
    view_service: ProfileViewService = Depends(get_profile_view_service),
) -> ProfileUpdateResponse:
    result = await service.remove_image(user.id, kind)
    view_service.clear_image_failure(user.id, kind)
    return _update_response(result)


@router.post(
    "/images/{kind}/failures",
    response_model=ImageFailureResponse,
    summary="Report that an image failed to load",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def report_image_failure(
    request: Request,
    kind: ImageKind,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
    view_service: ProfileViewService = Depends(get_profile_view_service),
) -> ImageFailureResponse:
    """The slot shows the placeholder image until its link changes."""
    profile = await service.get_profile(user.id)
    toast = view_service.report_image_failure(user.id, kind, getattr(profile, kind.field_name))
    image = view_service.render_images(user.id, profile)[kind]
    return ImageFailureResponse(
        image=image_response(image),
        notification=NotificationResponse.from_toast(toast),
    )


@router.post(
    "/preview",
    response_model=ViewStateResponse,
    summary="View as visitor",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def enter_preview(
    request: Request,
    user: CurrentUser,
    view_service: ProfileViewService = Depends(get_profile_view_service),
) -> ViewStateResponse:
    """Hide edit and share controls; only the exit control remains."""
    return _view_state(view_service.enter_preview(user.id))


@router.delete(
    "/preview",
    response_model=ViewStateResponse,
    summary="Leave visitor preview",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def exit_preview(
    request: Request,
    user: CurrentUser,
    view_service: ProfileViewService = Depends(get_profile_view_service),
) -> ViewStateResponse:
    return _view_state(view_service.exit_preview(user.id))


@router.post(
    "/share-link",
    response_model=ShareLinkResponse,
    summary="Copy profile link",
    responses={400: {"model": ErrorResponse, "description": "Profile has no username"}},
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def copy_profile_link(
    request: Request,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
    view_service: ProfileViewService = Depends(get_profile_view_service),
) -> ShareLinkResponse:
    """Public URL of the profile, ``<origin>/perfil/<username>``."""
    profile = await service.get_profile(user.id)
    clipboard = ResponseClipboard()
    toast = view_service.copy_profile_link(profile, resolve_origin(request), clipboard)
    return ShareLinkResponse(
        url=clipboard.text or "",
        notification=NotificationResponse.from_toast(toast),
    )
