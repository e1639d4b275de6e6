"""Pydantic schemas for Product API."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ProductResponse(BaseModel):
    """Schema for Product response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    title: str
    description: str | None = None
    price: Decimal | None = None
    image_url: str | None = None
    location_id: UUID | None = None
    created_at: datetime


class ProductListResponse(BaseModel):
    """Schema for list of Products."""

    data: list[ProductResponse]
