"""Profile page view state: preview mode, share links and image fallbacks."""

from collections import OrderedDict
from typing import Dict, Optional, Protocol
from urllib.parse import quote
from uuid import UUID

import structlog

from core.exceptions import UsernameNotSetError
from domain.entities.profile import Profile
from domain.entities.profile_view import (
    EMPTY_IMAGE_LABELS,
    ImageKind,
    ProfileImage,
    ProfileViewState,
)
from domain.entities.toast import Toast

logger = structlog.get_logger()

LINK_COPIED = Toast(
    title="Link copied!",
    description="Your profile link was copied to the clipboard.",
)
IMAGE_LOAD_FAILED = Toast.destructive(
    title="Error loading image",
    description="Check that the image link is correct",
)


class IClipboard(Protocol):
    """Where a copied share link goes."""

    def write_text(self, text: str) -> None:
        ...


def build_profile_link(origin: str, username: str) -> str:
    """``<origin>/perfil/<username>``"""
    return f"{origin.rstrip('/')}/perfil/{quote(username, safe='')}"


class ProfileViewService:
    """Holds each signed-in user's page state in memory."""

    def __init__(
        self,
        placeholder_url: str = "/placeholder.svg",
        max_states: int = 10_000,
    ) -> None:
        self._placeholder_url = placeholder_url
        self._max_states = max_states
        # Least recently used first
        self._states: "OrderedDict[UUID, ProfileViewState]" = OrderedDict()

    def get_state(self, user_id: UUID) -> ProfileViewState:
        state = self._states.get(user_id)
        if state is None:
            state = self._states[user_id] = ProfileViewState()
            while len(self._states) > self._max_states:
                self._states.popitem(last=False)
        else:
            self._states.move_to_end(user_id)
        return state

    def enter_preview(self, user_id: UUID) -> ProfileViewState:
        """Show the page the way a visitor sees it."""
        state = self.get_state(user_id)
        state.enter_preview()
        return state

    def exit_preview(self, user_id: UUID) -> ProfileViewState:
        state = self.get_state(user_id)
        state.exit_preview()
        return state

    def copy_profile_link(
        self, profile: Profile, origin: str, clipboard: IClipboard
    ) -> Toast:
        """Write the public profile URL to ``clipboard``.

        Raises:
            UsernameNotSetError: the profile has no username to link to
        """
        if not profile.username:
            raise UsernameNotSetError()

        clipboard.write_text(build_profile_link(origin, profile.username))
        return LINK_COPIED

    def render_images(self, user_id: UUID, profile: Profile) -> Dict[ImageKind, ProfileImage]:
        """Resolve what the avatar and cover slots should display."""
        failed = self.get_state(user_id).failed_images
        images = {}
        for kind in ImageKind:
            link = getattr(profile, kind.field_name)
            if not link:
                images[kind] = ProfileImage(
                    kind=kind, src=None, empty_label=EMPTY_IMAGE_LABELS[kind]
                )
            elif failed.get(kind) == link:
                images[kind] = ProfileImage(
                    kind=kind, src=self._placeholder_url, is_placeholder=True
                )
            else:
                images[kind] = ProfileImage(kind=kind, src=link)
        return images

    def report_image_failure(
        self, user_id: UUID, kind: ImageKind, link: Optional[str]
    ) -> Toast:
        """Show the placeholder for ``kind`` while it still points at ``link``."""
        failed = self.get_state(user_id).failed_images
        if link:
            failed[kind] = link
        logger.warning("profile_image_load_failed", user_id=str(user_id), kind=kind.value)
        return IMAGE_LOAD_FAILED

    def clear_image_failure(self, user_id: UUID, kind: ImageKind) -> None:
        self.get_state(user_id).failed_images.pop(kind, None)

    def reset(self, user_id: UUID) -> None:
        """Forget the user's page state (sign-out)."""
        self._states.pop(user_id, None)

    @property
    def placeholder_url(self) -> str:
        return self._placeholder_url
