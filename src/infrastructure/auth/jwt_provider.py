"""Supabase session provider.

Sessions are Supabase access tokens. Production tokens are ES256-signed and
verified against the project's JWKS; locally created tokens (tests, local
development) are HS256-signed with the shared secret.

Access token payload:
    {
        "sub": "user-uuid",
        "email": "ana@example.com",
        "role": "authenticated",
        "aud": "authenticated",
        "user_metadata": { "full_name": "Ana" },
        "exp": 1234567890
    }
"""

import logging
import time
from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

import httpx
from jose import JWTError, jwt
from jose.backends import ECKey

from core.config import settings
from infrastructure.auth.provider import TokenUser

logger = logging.getLogger(__name__)

# kid -> JWK, fetched once and refreshed when an unknown kid shows up
_jwks_cache: dict[str, Any] | None = None
# time.monotonic() of the last fetch attempt
_jwks_fetched_at: float | None = None
# Unknown kids trigger at most one fetch per interval
JWKS_REFRESH_INTERVAL_SECONDS = 60.0


async def _get_jwks_keys(refresh: bool = False) -> dict[str, Any]:
    """Fetch and cache the project's JWKS keys."""
    global _jwks_cache, _jwks_fetched_at
    if _jwks_cache is not None and not refresh:
        return _jwks_cache
    if (
        _jwks_fetched_at is not None
        and time.monotonic() - _jwks_fetched_at < JWKS_REFRESH_INTERVAL_SECONDS
    ):
        logger.debug("JWKS fetch skipped; last attempt was too recent")
        return _jwks_cache or {}

    jwks_url = settings.supabase_jwks_url
    if not jwks_url:
        return {}

    _jwks_fetched_at = time.monotonic()

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(jwks_url, timeout=10.0)
            response.raise_for_status()
    except httpx.HTTPError:
        logger.exception("Failed to fetch JWKS from %s", jwks_url)
        return {}

    _jwks_cache = {
        key["kid"]: key for key in response.json().get("keys", []) if key.get("kid")
    }
    logger.info("Fetched %d JWKS keys", len(_jwks_cache))
    return _jwks_cache


class JWTAuthProvider:
    """Validates Supabase sessions and revokes them on sign-out."""

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
        logout_url: str = settings.supabase_logout_url,
        api_key: str = settings.supabase_anon_key,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes
        self._logout_url = logout_url
        self._api_key = api_key

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Resolve an access token to its session user.

        Args:
            token: The bearer token from the Authorization header

        Returns:
            TokenUser if valid, None if invalid, expired or missing claims
        """
        try:
            header = jwt.get_unverified_header(token)
            if header.get("alg") == "ES256":
                payload = await self._decode_es256(token, header)
            else:
                payload = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )
        except JWTError:
            return None

        if not payload or not payload.get("sub") or not payload.get("email"):
            return None

        try:
            user_id = UUID(payload["sub"])
        except ValueError:
            return None

        metadata = payload.get("user_metadata") or {}
        return TokenUser(
            id=user_id,
            email=payload["email"],
            display_name=metadata.get("full_name") or metadata.get("display_name"),
            role=payload.get("role"),
        )

    async def _decode_es256(self, token: str, header: dict) -> Optional[dict]:
        kid = header.get("kid")
        if not kid:
            return None

        key_data = (await _get_jwks_keys()).get(kid)
        if not key_data:
            # Signing key rotated since the last fetch
            key_data = (await _get_jwks_keys(refresh=True)).get(kid)
            if not key_data:
                logger.warning("JWKS key not found for kid=%s", kid)
                return None

        return jwt.decode(
            token,
            ECKey(key_data, algorithm="ES256"),
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    async def sign_out(self, token: str) -> bool:
        """
        Revoke the session at the Supabase auth endpoint.

        Without a configured backend there is nothing to revoke and the
        call succeeds. Backend failures are logged and reported as False.
        """
        if not self._logout_url:
            return True

        headers = {"Authorization": f"Bearer {token}"}
        if self._api_key:
            headers["apikey"] = self._api_key

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(self._logout_url, headers=headers, timeout=10.0)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Session revoke failed: %s", exc)
            return False
        return True

    def create_token(self, user: TokenUser) -> str:
        """
        Create an HS256 access token for a user (tests, local development).
        """
        expire = datetime.utcnow() + timedelta(minutes=self._expire_minutes)

        payload: dict = {
            "sub": str(user.id),
            "email": user.email,
            "aud": "authenticated",
            "role": user.role or "authenticated",
            "exp": expire,
            "user_metadata": {
                "full_name": user.display_name,
            },
        }

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
