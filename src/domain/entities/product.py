"""Product domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4


@dataclass
class Product:
    """A product listed by a user. Read-only on the profile page."""

    user_id: UUID
    title: str
    id: UUID = field(default_factory=uuid4)
    description: Optional[str] = None
    price: Optional[Decimal] = None
    image_url: Optional[str] = None
    location_id: Optional[UUID] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
