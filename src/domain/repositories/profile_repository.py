"""Profile repository protocol."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.profile import Profile, ProfileValues


class IProfileRepository(Protocol):
    """Repository interface for Profile entities."""

    async def get(self, id: UUID) -> Profile | None:
        """Get a profile by ID."""
        ...

    async def update(
        self,
        id: UUID,
        values: ProfileValues,
        basic_info_updated_at: datetime | None = None,
    ) -> Profile | None:
        """Write every editable field; stamp the restricted-field time when given."""
        ...

    async def can_update_basic_info(self, id: UUID) -> bool:
        """Ask the backend whether username/phone may change now."""
        ...
