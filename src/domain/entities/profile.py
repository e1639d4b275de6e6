"""Profile domain entity."""

import re
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from typing import Any
from uuid import UUID, uuid4

# Fields that may only change once per cooldown window
RESTRICTED_FIELDS = ("username", "phone")

# Checked only when a username is set or changed; stored names are left alone
USERNAME_PATTERN = re.compile(r"[A-Za-z0-9_.]+")


@dataclass
class ProfileValues:
    """The full set of user-editable profile fields."""

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

    def as_dict(self) -> dict[str, Any]:
        """Column values in declaration order."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


EDITABLE_FIELDS = tuple(f.name for f in fields(ProfileValues))


def _same(a: str | None, b: str | None) -> bool:
    """Blank and missing values compare equal."""
    return (a or "") == (b or "")


@dataclass
class Profile(ProfileValues):
    """Domain entity for a user's social profile (row in ``profiles``)."""

    id: UUID = field(default_factory=uuid4)
    basic_info_updated_at: datetime | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def values(self) -> ProfileValues:
        """Snapshot of the editable fields."""
        return ProfileValues(**{name: getattr(self, name) for name in EDITABLE_FIELDS})

    def restricted_changes(self, values: ProfileValues) -> list[str]:
        """Names of restricted fields that ``values`` would change."""
        return [
            name
            for name in RESTRICTED_FIELDS
            if not _same(getattr(self, name), getattr(values, name))
        ]
