"""Pydantic schemas for Profile API."""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from api.v1.schemas.common import NotificationResponse
from api.v1.schemas.location import LocationResponse
from api.v1.schemas.product import ProductResponse
from domain.entities.profile import EDITABLE_FIELDS, Profile, ProfileValues
from domain.entities.profile_view import ImageKind, ProfileControl, ProfileImage, ViewMode


class ProfileUpdate(BaseModel):
    """Full set of edited profile fields.

    Blank strings are stored as nulls.
    """

    full_name: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    birth_date: date | None = None
    street: str | None = Field(None, max_length=255)
    house_number: str | None = Field(None, max_length=50)
    city: str | None = Field(None, max_length=255)
    postal_code: str | None = Field(None, max_length=20)
    avatar_url: str | None = None
    cover_url: str | None = None
    username: str | None = Field(None, max_length=50)
    bio: str | None = Field(None, max_length=500)
    website: str | None = Field(None, max_length=500)
    status: str | None = Field(None, max_length=255)

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    def to_values(self) -> ProfileValues:
        return ProfileValues(**self.model_dump(include=set(EDITABLE_FIELDS)))


class ImageLink(BaseModel):
    """A pasted avatar/cover link."""

    url: str = Field(..., min_length=1, max_length=2000)

    @field_validator("url")
    @classmethod
    def strip_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Image link cannot be blank")
        return v


class ProfileResponse(BaseModel):
    """Schema for Profile response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "full_name": "Ana Souza",
                "username": "ana",
                "city": "Porto",
                "avatar_url": "https://dl.dropboxusercontent.com/s/abc/ana.jpg",
                "basic_info_updated_at": "2026-09-01T12:00:00",
            }
        },
    )

    id: UUID
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    birth_date: date | None = None
    street: str | None = None
    house_number: str | None = None
    city: str | None = None
    postal_code: str | None = None
    avatar_url: str | None = None
    cover_url: str | None = None
    username: str | None = None
    bio: str | None = None
    website: str | None = None
    status: str | None = None
    basic_info_updated_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ProfileDetailResponse(BaseModel):
    """Schema for single Profile."""

    data: ProfileResponse


class ProfileUpdateResponse(BaseModel):
    """Schema for a successful profile mutation."""

    data: ProfileResponse
    notification: NotificationResponse


class ProfileFormValues(BaseModel):
    """Edit dialog defaults: every field as a string, blanks for nulls."""

    full_name: str = ""
    email: str = ""
    phone: str = ""
    birth_date: str = ""
    street: str = ""
    house_number: str = ""
    city: str = ""
    postal_code: str = ""
    avatar_url: str = ""
    cover_url: str = ""
    username: str = ""
    bio: str = ""
    website: str = ""
    status: str = ""

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileFormValues":
        values = profile.values().as_dict()
        birth_date = values.pop("birth_date")
        return cls(
            birth_date=birth_date.strftime("%Y-%m-%d") if birth_date else "",
            **{name: value or "" for name, value in values.items()},
        )


class ProfileFormResponse(BaseModel):
    data: ProfileFormValues


class ImageResponse(BaseModel):
    """What an image slot renders."""

    model_config = ConfigDict(from_attributes=True)

    kind: ImageKind
    src: str | None = None
    is_placeholder: bool = False
    empty_label: str | None = None


class ViewStateResponse(BaseModel):
    """Current page mode and the controls it exposes."""

    mode: ViewMode
    controls: list[ProfileControl]


class ProfilePageResponse(BaseModel):
    """Everything the profile page renders in one payload."""

    profile: ProfileResponse
    products: list[ProductResponse]
    locations: list[LocationResponse]
    view: ViewStateResponse
    images: dict[ImageKind, ImageResponse]


class ImageFailureResponse(BaseModel):
    image: ImageResponse
    notification: NotificationResponse


class ShareLinkResponse(BaseModel):
    """Share link written to the clipboard."""

    url: str
    notification: NotificationResponse


def image_response(image: ProfileImage) -> ImageResponse:
    return ImageResponse.model_validate(image)
