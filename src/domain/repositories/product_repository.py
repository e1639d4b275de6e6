"""Product repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.product import Product


class IProductRepository(Protocol):
    """Read-only repository interface for Product entities."""

    async def get_all_for_user(self, user_id: UUID) -> list[Product]:
        """Get all products owned by a user."""
        ...
