"""Profile page view state."""

from dataclasses import dataclass, field
from enum import StrEnum


class ViewMode(StrEnum):
    """How the owner currently sees their own page."""

    NORMAL = "normal"
    PREVIEW = "preview"


class ProfileControl(StrEnum):
    """Actions the page offers in a given mode."""

    EDIT_AVATAR = "edit_avatar"
    EDIT_COVER = "edit_cover"
    EDIT_PROFILE = "edit_profile"
    COPY_PROFILE_LINK = "copy_profile_link"
    VIEW_AS_VISITOR = "view_as_visitor"
    EXIT_PREVIEW = "exit_preview"


class ImageKind(StrEnum):
    AVATAR = "avatar"
    COVER = "cover"

    @property
    def field_name(self) -> str:
        """Profile column holding the link."""
        return f"{self.value}_url"


NORMAL_CONTROLS: tuple[ProfileControl, ...] = (
    ProfileControl.EDIT_AVATAR,
    ProfileControl.EDIT_COVER,
    ProfileControl.EDIT_PROFILE,
    ProfileControl.COPY_PROFILE_LINK,
    ProfileControl.VIEW_AS_VISITOR,
)
PREVIEW_CONTROLS: tuple[ProfileControl, ...] = (ProfileControl.EXIT_PREVIEW,)

EMPTY_IMAGE_LABELS = {
    ImageKind.AVATAR: "No profile photo",
    ImageKind.COVER: "No cover photo",
}


@dataclass
class ProfileViewState:
    """Per-user page state.

    The mode only changes through ``enter_preview``/``exit_preview``.
    """

    mode: ViewMode = ViewMode.NORMAL
    # kind -> the link that failed to load
    failed_images: dict[ImageKind, str] = field(default_factory=dict)

    @property
    def controls(self) -> tuple[ProfileControl, ...]:
        if self.mode is ViewMode.PREVIEW:
            return PREVIEW_CONTROLS
        return NORMAL_CONTROLS

    def enter_preview(self) -> None:
        self.mode = ViewMode.PREVIEW

    def exit_preview(self) -> None:
        self.mode = ViewMode.NORMAL


@dataclass(frozen=True, slots=True)
class ProfileImage:
    """What an image slot renders."""

    kind: ImageKind
    src: str | None
    is_placeholder: bool = False
    empty_label: str | None = None
