"""Location domain entity."""

from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Location:
    """Reference location, listed ordered by name."""

    name: str
    id: UUID = field(default_factory=uuid4)
    state: Optional[str] = None
