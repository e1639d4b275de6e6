"""Location repository protocol."""

from typing import Protocol

from domain.entities.location import Location


class ILocationRepository(Protocol):
    """Read-only repository interface for Location entities."""

    async def get_all(self) -> list[Location]:
        """Get every location ordered by name."""
        ...
