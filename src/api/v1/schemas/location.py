"""Pydantic schemas for Location API."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class LocationResponse(BaseModel):
    """Schema for Location response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "7a1c2f4e-3b1d-4d6f-9a53-0c2f6e5b7d11",
                "name": "Lisboa",
                "state": "Lisboa",
            }
        },
    )

    id: UUID
    name: str
    state: str | None = None


class LocationListResponse(BaseModel):
    """Schema for list of Locations."""

    data: list[LocationResponse]
