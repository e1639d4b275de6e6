"""Profile service layer with business logic."""

import asyncio
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, List, Optional
from uuid import UUID

import structlog

from core.exceptions import (
    AuthenticationError,
    BackendError,
    BasicInfoCooldownError,
    InvalidUsernameError,
    ProfileNotFoundError,
    ProfileUpdateError,
)
from domain.entities.location import Location
from domain.entities.product import Product
from domain.entities.profile import USERNAME_PATTERN, Profile, ProfileValues
from domain.entities.profile_view import ImageKind
from domain.entities.toast import Toast
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.media_links import normalize_media_url
from domain.services.query_cache import QueryCache

logger = structlog.get_logger()

PROFILE_QUERY = "profile"
PRODUCTS_QUERY = "userProducts"
LOCATIONS_QUERY = "locations"

PROFILE_UPDATED = Toast(
    title="Profile updated",
    description="Your information was updated successfully",
)
IMAGE_REMOVED = {
    ImageKind.AVATAR: Toast(
        title="Profile photo removed",
        description="Your profile photo was removed successfully",
    ),
    ImageKind.COVER: Toast(
        title="Cover photo removed",
        description="Your cover photo was removed successfully",
    ),
}


@dataclass(frozen=True, slots=True)
class ProfileUpdateResult:
    """Outcome of a successful profile mutation."""

    profile: Profile
    toast: Toast
    basic_info_stamped: bool = False


@dataclass(frozen=True, slots=True)
class ProfilePageData:
    """Everything the profile page renders from the backend."""

    profile: Profile
    products: List[Product]
    locations: List[Location]


def _require_session(user_id: Optional[UUID]) -> UUID:
    if user_id is None:
        raise AuthenticationError(message="Not authenticated")
    return user_id


def _normalize_media(values: ProfileValues) -> ProfileValues:
    return replace(
        values,
        avatar_url=normalize_media_url(values.avatar_url),
        cover_url=normalize_media_url(values.cover_url),
    )


class ProfileService:
    """Service layer for the signed-in user's profile page.

    ``user_id`` arguments come from the request session and are ``None``
    when the caller is not signed in.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        cache: QueryCache,
        cooldown_days: int = 30,
    ) -> None:
        self._uow_factory = uow_factory
        self._cache = cache
        self._cooldown_days = cooldown_days

    # --- loaders ---

    async def get_profile(self, user_id: Optional[UUID]) -> Profile:
        """Load the session user's profile with media links normalized."""
        user_id = _require_session(user_id)

        async def load() -> Profile:
            async with self._uow_factory() as uow:
                profile = await uow.profiles.get(user_id)
            if not profile:
                raise ProfileNotFoundError(str(user_id))
            profile.avatar_url = normalize_media_url(profile.avatar_url)
            profile.cover_url = normalize_media_url(profile.cover_url)
            return profile

        return await self._cache.fetch((PROFILE_QUERY, user_id), load)

    async def get_products(self, user_id: Optional[UUID]) -> List[Product]:
        """Products owned by the session user; empty without a session."""
        if user_id is None:
            return []

        async def load() -> List[Product]:
            async with self._uow_factory() as uow:
                return await uow.products.get_all_for_user(user_id)  # type: ignore[no-any-return]

        return await self._cache.fetch((PRODUCTS_QUERY, user_id), load)

    async def get_locations(self) -> List[Location]:
        """All locations ordered by name."""

        async def load() -> List[Location]:
            async with self._uow_factory() as uow:
                return await uow.locations.get_all()  # type: ignore[no-any-return]

        return await self._cache.fetch((LOCATIONS_QUERY,), load)

    async def get_page(self, user_id: Optional[UUID]) -> ProfilePageData:
        """Fetch profile, products and locations concurrently.

        Auxiliary failures degrade to empty lists; a profile failure is raised.
        """
        profile, products, locations = await asyncio.gather(
            self.get_profile(user_id),
            self.get_products(user_id),
            self.get_locations(),
            return_exceptions=True,
        )
        if isinstance(profile, BaseException):
            raise profile

        return ProfilePageData(
            profile=profile,
            products=self._auxiliary_or_empty(PRODUCTS_QUERY, products),
            locations=self._auxiliary_or_empty(LOCATIONS_QUERY, locations),
        )

    @staticmethod
    def _auxiliary_or_empty(query: str, result: Any) -> List[Any]:
        if isinstance(result, BaseException):
            logger.warning(
                "auxiliary_loader_failed",
                query=query,
                error=str(result),
                error_type=type(result).__name__,
            )
            return []
        return result  # type: ignore[no-any-return]

    # --- mutations ---

    async def update_profile(
        self, user_id: Optional[UUID], values: ProfileValues
    ) -> ProfileUpdateResult:
        """Write the full field set, enforcing the username/phone cooldown.

        Raises:
            AuthenticationError: no session
            BasicInfoCooldownError: username/phone changed too soon
            InvalidUsernameError: a new username with disallowed characters
            ProfileUpdateError: the backend failed the check or the write
        """
        user_id = _require_session(user_id)
        values = _normalize_media(values)
        current = await self.get_profile(user_id)

        changed = current.restricted_changes(values)
        if (
            "username" in changed
            and values.username
            and not USERNAME_PATTERN.fullmatch(values.username)
        ):
            raise InvalidUsernameError(values.username)
        stamp: Optional[datetime] = None

        try:
            async with self._uow_factory() as uow:
                if changed:
                    allowed = await uow.profiles.can_update_basic_info(user_id)
                    if not allowed:
                        logger.info(
                            "basic_info_update_denied",
                            user_id=str(user_id),
                            fields=changed,
                        )
                        raise BasicInfoCooldownError(self._cooldown_days)
                    stamp = datetime.utcnow()

                updated = await uow.profiles.update(
                    user_id, values, basic_info_updated_at=stamp
                )
                if not updated:
                    raise ProfileNotFoundError(str(user_id))
                await uow.commit()
        except BackendError as exc:
            raise ProfileUpdateError(exc.message) from exc

        self._cache.invalidate((PROFILE_QUERY, user_id))
        logger.info(
            "profile_updated",
            user_id=str(user_id),
            restricted_fields=changed,
        )

        profile = await self.get_profile(user_id)
        return ProfileUpdateResult(
            profile=profile,
            toast=PROFILE_UPDATED,
            basic_info_stamped=stamp is not None,
        )

    async def replace_image(
        self, user_id: Optional[UUID], kind: ImageKind, link: str
    ) -> ProfileUpdateResult:
        """Swap the avatar or cover for a pasted link."""
        current = await self.get_profile(user_id)
        values = replace(current.values(), **{kind.field_name: link})
        return await self.update_profile(user_id, values)

    async def remove_image(
        self, user_id: Optional[UUID], kind: ImageKind
    ) -> ProfileUpdateResult:
        """Clear the avatar or cover link."""
        current = await self.get_profile(user_id)
        values = replace(current.values(), **{kind.field_name: None})
        result = await self.update_profile(user_id, values)
        return replace(result, toast=IMAGE_REMOVED[kind])

    def forget(self, user_id: UUID) -> None:
        """Drop the user's cached queries (sign-out)."""
        self._cache.invalidate((PROFILE_QUERY, user_id))
        self._cache.invalidate((PRODUCTS_QUERY, user_id))
