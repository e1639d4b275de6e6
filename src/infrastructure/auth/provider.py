"""Authentication provider protocol."""

from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID


@dataclass
class TokenUser:
    """The session owner, as read from a Supabase access token."""

    id: UUID
    email: str
    display_name: Optional[str] = None
    role: Optional[str] = None


class IAuthProvider(Protocol):
    """Protocol for session providers."""

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Resolve an access token to its session user.

        Returns:
            TokenUser if valid, None if invalid or expired
        """
        ...

    async def sign_out(self, token: str) -> bool:
        """
        Revoke the session behind ``token`` at the auth backend.

        Returns:
            True if the backend acknowledged the logout
        """
        ...

    def create_token(self, user: TokenUser) -> str:
        """Issue a locally signed token (tests and local development)."""
        ...
