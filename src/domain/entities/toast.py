"""User-facing notifications shown by the profile page."""

from dataclasses import dataclass
from enum import StrEnum


class ToastVariant(StrEnum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True, slots=True)
class Toast:
    """A transient notification (title + description)."""

    title: str
    description: str
    variant: ToastVariant = ToastVariant.DEFAULT

    @classmethod
    def destructive(cls, title: str, description: str) -> "Toast":
        return cls(title=title, description=description, variant=ToastVariant.DESTRUCTIVE)
