"""Unit tests for the Supabase session provider.

Covers:
- claim checks in validate_token
- _get_jwks_keys() fetching, caching and error handling
- the ES256 path with a mocked JWKS endpoint
- sign_out against the auth logout endpoint
"""

import time
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import httpx
import pytest
from jose import jwt as jose_jwt

from infrastructure.auth import jwt_provider as jwt_provider_module
from infrastructure.auth.jwt_provider import JWTAuthProvider, _get_jwks_keys
from infrastructure.auth.provider import TokenUser

JWKS_URL = "https://example.supabase.co/auth/v1/.well-known/jwks.json"
LOGOUT_URL = "https://example.supabase.co/auth/v1/logout"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_hs256_token(payload: dict, secret: str = "test-secret") -> str:
    return jose_jwt.encode(payload, secret, algorithm="HS256")


def _mock_client(response: MagicMock | None = None, error: Exception | None = None) -> AsyncMock:
    """An httpx.AsyncClient stand-in usable as an async context manager."""
    client = AsyncMock()
    if error is not None:
        client.get.side_effect = error
        client.post.side_effect = error
    else:
        client.get.return_value = response
        client.post.return_value = response
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


def _jwks_response(keys: list[dict]) -> MagicMock:
    response = MagicMock()
    response.json.return_value = {"keys": keys}
    response.raise_for_status = MagicMock()
    return response


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clear_jwks_cache():
    """Reset the module-level JWKS cache around every test."""
    jwt_provider_module._jwks_cache = None
    jwt_provider_module._jwks_fetched_at = None
    yield
    jwt_provider_module._jwks_cache = None
    jwt_provider_module._jwks_fetched_at = None


@pytest.fixture
def hs256_provider() -> JWTAuthProvider:
    return JWTAuthProvider(
        secret_key="test-secret", algorithm="HS256", expire_minutes=30, logout_url=""
    )


# ---------------------------------------------------------------------------
# validate_token
# ---------------------------------------------------------------------------


class TestValidateToken:
    async def test_round_trips_created_token(self, hs256_provider: JWTAuthProvider):
        user = TokenUser(id=uuid4(), email="ana@example.com", display_name="Ana Souza")

        result = await hs256_provider.validate_token(hs256_provider.create_token(user))

        assert result is not None
        assert result.id == user.id
        assert result.display_name == "Ana Souza"
        assert result.role == "authenticated"

    async def test_reads_display_name_from_metadata(self, hs256_provider: JWTAuthProvider):
        token = _make_hs256_token(
            {
                "sub": str(uuid4()),
                "email": "ana@example.com",
                "user_metadata": {"display_name": "Ana"},
                "exp": 9999999999,
            }
        )

        result = await hs256_provider.validate_token(token)

        assert result is not None
        assert result.display_name == "Ana"

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "user@example.com"},
            {"sub": "", "email": "user@example.com"},
            {"sub": "not-a-uuid", "email": "user@example.com"},
            {"sub": "00000000-0000-0000-0000-000000000001"},
            {"sub": "00000000-0000-0000-0000-000000000001", "email": ""},
        ],
    )
    async def test_returns_none_for_bad_claims(
        self, hs256_provider: JWTAuthProvider, payload: dict
    ):
        token = _make_hs256_token({**payload, "exp": 9999999999})

        assert await hs256_provider.validate_token(token) is None

    async def test_returns_none_for_wrong_secret(self, hs256_provider: JWTAuthProvider):
        token = _make_hs256_token(
            {"sub": str(uuid4()), "email": "a@example.com", "exp": 9999999999},
            secret="other-secret",
        )

        assert await hs256_provider.validate_token(token) is None

    async def test_returns_none_for_garbage(self, hs256_provider: JWTAuthProvider):
        assert await hs256_provider.validate_token("not.a.jwt") is None


# ---------------------------------------------------------------------------
# _get_jwks_keys
# ---------------------------------------------------------------------------


class TestGetJwksKeys:
    async def test_returns_empty_without_supabase_url(self):
        with patch.object(jwt_provider_module, "settings") as mock_settings:
            mock_settings.supabase_jwks_url = ""

            assert await _get_jwks_keys() == {}

    async def test_fetches_and_caches(self):
        client = _mock_client(
            _jwks_response(
                [
                    {"kid": "key-1", "kty": "EC", "crv": "P-256", "x": "aa", "y": "bb"},
                    {"kid": "key-2", "kty": "EC", "crv": "P-256", "x": "cc", "y": "dd"},
                ]
            )
        )

        with (
            patch.object(jwt_provider_module, "settings") as mock_settings,
            patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client),
        ):
            mock_settings.supabase_jwks_url = JWKS_URL

            result = await _get_jwks_keys()
            client.get.reset_mock()
            cached = await _get_jwks_keys()

        assert set(result) == {"key-1", "key-2"}
        assert cached == result
        client.get.assert_not_called()

    async def test_refresh_bypasses_cache(self):
        jwt_provider_module._jwks_cache = {"old": {}}
        client = _mock_client(_jwks_response([{"kid": "new", "kty": "EC"}]))

        with (
            patch.object(jwt_provider_module, "settings") as mock_settings,
            patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client),
        ):
            mock_settings.supabase_jwks_url = JWKS_URL

            result = await _get_jwks_keys(refresh=True)

        assert set(result) == {"new"}

    async def test_refresh_is_throttled(self):
        jwt_provider_module._jwks_cache = {"cached": {}}
        jwt_provider_module._jwks_fetched_at = time.monotonic()
        client = _mock_client(_jwks_response([{"kid": "new", "kty": "EC"}]))

        with (
            patch.object(jwt_provider_module, "settings") as mock_settings,
            patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client),
        ):
            mock_settings.supabase_jwks_url = JWKS_URL

            result = await _get_jwks_keys(refresh=True)

        assert set(result) == {"cached"}
        client.get.assert_not_called()

    async def test_refresh_allowed_after_interval(self):
        jwt_provider_module._jwks_cache = {"cached": {}}
        jwt_provider_module._jwks_fetched_at = (
            time.monotonic() - jwt_provider_module.JWKS_REFRESH_INTERVAL_SECONDS - 1
        )
        client = _mock_client(_jwks_response([{"kid": "new", "kty": "EC"}]))

        with (
            patch.object(jwt_provider_module, "settings") as mock_settings,
            patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client),
        ):
            mock_settings.supabase_jwks_url = JWKS_URL

            result = await _get_jwks_keys(refresh=True)

        assert set(result) == {"new"}
        assert jwt_provider_module._jwks_fetched_at is not None

    async def test_failed_fetch_is_not_retried_immediately(self):
        client = _mock_client(error=httpx.ConnectError("Connection refused"))

        with (
            patch.object(jwt_provider_module, "settings") as mock_settings,
            patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client),
        ):
            mock_settings.supabase_jwks_url = JWKS_URL

            assert await _get_jwks_keys() == {}
            assert await _get_jwks_keys(refresh=True) == {}

        assert client.get.call_count == 1

    async def test_returns_empty_on_http_error(self):
        client = _mock_client(error=httpx.ConnectError("Connection refused"))

        with (
            patch.object(jwt_provider_module, "settings") as mock_settings,
            patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client),
        ):
            mock_settings.supabase_jwks_url = JWKS_URL

            assert await _get_jwks_keys() == {}

    async def test_skips_keys_without_kid(self):
        client = _mock_client(
            _jwks_response(
                [
                    {"kty": "EC", "crv": "P-256", "x": "aa", "y": "bb"},
                    {"kid": "good-key", "kty": "EC", "crv": "P-256", "x": "cc", "y": "dd"},
                ]
            )
        )

        with (
            patch.object(jwt_provider_module, "settings") as mock_settings,
            patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client),
        ):
            mock_settings.supabase_jwks_url = JWKS_URL

            result = await _get_jwks_keys()

        assert list(result) == ["good-key"]


# ---------------------------------------------------------------------------
# ES256
# ---------------------------------------------------------------------------


class TestDecodeEs256:
    async def test_returns_none_without_kid(self, hs256_provider: JWTAuthProvider):
        result = await hs256_provider._decode_es256("dummy.token.value", {"alg": "ES256"})

        assert result is None

    async def test_returns_none_when_kid_unknown_after_refetch(
        self, hs256_provider: JWTAuthProvider
    ):
        with patch.object(
            jwt_provider_module, "_get_jwks_keys", new_callable=AsyncMock
        ) as mock_get_jwks:
            mock_get_jwks.return_value = {"other-kid": {"kty": "EC"}}

            result = await hs256_provider._decode_es256(
                "dummy.token.value", {"alg": "ES256", "kid": "missing-kid"}
            )

        assert result is None
        assert mock_get_jwks.call_count == 2

    async def test_decodes_with_jwks_key(self, hs256_provider: JWTAuthProvider):
        key_data = {"kid": "test-kid", "kty": "EC", "crv": "P-256"}
        payload = {"sub": str(uuid4()), "email": "test@example.com"}

        with (
            patch.object(
                jwt_provider_module, "_get_jwks_keys", new_callable=AsyncMock
            ) as mock_get_jwks,
            patch.object(jwt_provider_module, "ECKey") as mock_eckey_cls,
            patch.object(jwt_provider_module, "jwt") as mock_jwt,
        ):
            mock_get_jwks.return_value = {"test-kid": key_data}
            mock_jwt.decode.return_value = payload

            result = await hs256_provider._decode_es256(
                "es256.token.value", {"alg": "ES256", "kid": "test-kid"}
            )

        assert result == payload
        mock_eckey_cls.assert_called_once_with(key_data, algorithm="ES256")
        mock_jwt.decode.assert_called_once_with(
            "es256.token.value",
            mock_eckey_cls.return_value,
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    async def test_validate_token_takes_es256_path(self, hs256_provider: JWTAuthProvider):
        user_id = str(uuid4())
        payload = {
            "sub": user_id,
            "email": "es256user@example.com",
            "user_metadata": {"full_name": "ES256 User"},
            "role": "authenticated",
        }

        with patch.object(jwt_provider_module, "jwt") as mock_jwt:
            mock_jwt.get_unverified_header.return_value = {"alg": "ES256", "kid": "k1"}

            with patch.object(
                hs256_provider, "_decode_es256", new_callable=AsyncMock
            ) as mock_es256:
                mock_es256.return_value = payload

                result = await hs256_provider.validate_token("es256.token.here")

        mock_es256.assert_called_once_with("es256.token.here", {"alg": "ES256", "kid": "k1"})
        assert result is not None
        assert str(result.id) == user_id
        assert result.display_name == "ES256 User"


# ---------------------------------------------------------------------------
# sign_out
# ---------------------------------------------------------------------------


class TestSignOut:
    async def test_succeeds_without_backend(self, hs256_provider: JWTAuthProvider):
        assert await hs256_provider.sign_out("token") is True

    async def test_posts_to_logout_endpoint(self):
        provider = JWTAuthProvider(
            secret_key="s", algorithm="HS256", logout_url=LOGOUT_URL, api_key="anon-key"
        )
        response = MagicMock()
        response.raise_for_status = MagicMock()
        client = _mock_client(response)

        with patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client):
            result = await provider.sign_out("the-token")

        assert result is True
        client.post.assert_called_once_with(
            LOGOUT_URL,
            headers={"Authorization": "Bearer the-token", "apikey": "anon-key"},
            timeout=10.0,
        )

    async def test_reports_backend_failure(self):
        provider = JWTAuthProvider(secret_key="s", algorithm="HS256", logout_url=LOGOUT_URL)
        client = _mock_client(error=httpx.ConnectError("unreachable"))

        with patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client):
            assert await provider.sign_out("the-token") is False
