"""Common Pydantic schemas shared across the API."""

from typing import Any

from pydantic import BaseModel, ConfigDict

from domain.entities.toast import Toast, ToastVariant


class NotificationResponse(BaseModel):
    """Toast the page shows after an action."""

    model_config = ConfigDict(from_attributes=True)

    title: str
    description: str
    variant: ToastVariant = ToastVariant.DEFAULT

    @classmethod
    def from_toast(cls, toast: Toast) -> "NotificationResponse":
        return cls(title=toast.title, description=toast.description, variant=toast.variant)


class ErrorResponse(BaseModel):
    """Standardized error response."""

    error_code: str
    message: str
    details: Any | None = None
    notification: NotificationResponse | None = None
