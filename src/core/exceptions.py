"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"
    BASIC_INFO_COOLDOWN = "BASIC_INFO_COOLDOWN"

    # Not found errors (404)
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    USERNAME_NOT_SET = "USERNAME_NOT_SET"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500/502)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


PROFILE_UPDATE_FAILED_TITLE = "Error updating profile"


class AppException(Exception):
    """Base application exception.

    ``notification_title`` marks errors that the page shows to the user as a
    destructive toast; the exception message becomes its description.
    """

    notification_title: str | None = None

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class ProfileNotFoundError(AppException):
    """Profile row not found."""

    def __init__(self, profile_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_NOT_FOUND,
            message=f"Profile not found: {profile_id}",
            status_code=404,
            details={"profile_id": profile_id},
        )


class BasicInfoCooldownError(AppException):
    """Username or phone changed again before the cooldown elapsed."""

    notification_title = PROFILE_UPDATE_FAILED_TITLE

    def __init__(self, cooldown_days: int = 30) -> None:
        super().__init__(
            error_code=ErrorCode.BASIC_INFO_COOLDOWN,
            message=(
                "You can only change your username or phone "
                f"{cooldown_days} days after the last update."
            ),
            status_code=403,
            details={"cooldown_days": cooldown_days},
        )


class InvalidUsernameError(AppException):
    """New username uses characters outside the allowed set."""

    notification_title = PROFILE_UPDATE_FAILED_TITLE

    def __init__(self, username: str) -> None:
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message="Username may only contain letters, digits, '_' and '.'",
            status_code=422,
            details={"username": username},
        )


class UsernameNotSetError(AppException):
    """A share link needs a username."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.USERNAME_NOT_SET,
            message="Set a username before sharing your profile",
            status_code=400,
        )


class BackendError(AppException):
    """The backend database rejected or failed a query."""

    def __init__(self, message: str = "Backend request failed") -> None:
        super().__init__(
            error_code=ErrorCode.DATABASE_ERROR,
            message=message,
            status_code=502,
        )


class ProfileUpdateError(BackendError):
    """Backend failure while writing the profile."""

    notification_title = PROFILE_UPDATE_FAILED_TITLE
