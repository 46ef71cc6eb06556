"""Tests for JWT validation and JWK set retrieval."""

import httpx
import pytest
import respx

from conftest import StaticKeyProvider, make_token
from dedicated_portal.exceptions import AuthenticationError
from dedicated_portal.server.auth import JWKSProvider, JWTAuthMiddleware, bearer_token

CERTS_URL = "https://sso.example.com/auth/realms/portal/protocol/openid-connect/certs"


class TestBearerToken:
    def test_extracts_token(self):
        assert bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    @pytest.mark.parametrize("header", [None, "", "Basic dXNlcjpwdw==", "Bearer "])
    def test_rejects_bad_header(self, header):
        with pytest.raises(AuthenticationError):
            bearer_token(header)


class TestValidate:
    @pytest.fixture
    def middleware(self, signing_keys):
        return JWTAuthMiddleware(app=None, key_provider=StaticKeyProvider(signing_keys["jwks"]))

    async def test_valid_token_returns_claims(self, middleware, signing_keys):
        token = make_token(signing_keys["private"], {"email": "user@example.com"})

        claims = await middleware.validate(token)

        assert claims["email"] == "user@example.com"

    async def test_foreign_signature(self, middleware, foreign_private_key):
        with pytest.raises(AuthenticationError, match="Invalid token"):
            await middleware.validate(make_token(foreign_private_key))

    async def test_expired_token(self, middleware, signing_keys):
        with pytest.raises(AuthenticationError, match="Invalid token"):
            await middleware.validate(make_token(signing_keys["private"], expires_in=-60))

    async def test_garbage_token(self, middleware):
        with pytest.raises(AuthenticationError):
            await middleware.validate("not-a-jwt")

    async def test_unavailable_keys(self, signing_keys):
        provider = JWKSProvider(CERTS_URL)
        middleware = JWTAuthMiddleware(app=None, key_provider=provider)

        with respx.mock:
            respx.get(CERTS_URL).mock(return_value=httpx.Response(503))
            with pytest.raises(AuthenticationError, match="Can't load signing keys"):
                await middleware.validate(make_token(signing_keys["private"]))
        await provider.aclose()


class TestJWKSProvider:
    @respx.mock
    async def test_fetches_and_caches(self, signing_keys):
        route = respx.get(CERTS_URL).mock(return_value=httpx.Response(200, json=signing_keys["jwks"]))
        provider = JWKSProvider(CERTS_URL, ttl=300)

        assert await provider.get_keys() == signing_keys["jwks"]
        assert await provider.get_keys() == signing_keys["jwks"]
        assert route.call_count == 1
        await provider.aclose()

    @respx.mock
    async def test_refreshes_after_ttl(self, signing_keys):
        route = respx.get(CERTS_URL).mock(return_value=httpx.Response(200, json=signing_keys["jwks"]))
        provider = JWKSProvider(CERTS_URL, ttl=0)

        await provider.get_keys()
        await provider.get_keys()

        assert route.call_count == 2
        await provider.aclose()

    @respx.mock
    async def test_rejects_non_jwk_payload(self):
        respx.get(CERTS_URL).mock(return_value=httpx.Response(200, json={"certs": []}))
        provider = JWKSProvider(CERTS_URL)

        with pytest.raises(ValueError, match="not a JWK set"):
            await provider.get_keys()
        await provider.aclose()

    async def test_does_not_close_borrowed_client(self):
        async with httpx.AsyncClient() as http_client:
            provider = JWKSProvider(CERTS_URL, http_client=http_client)
            await provider.aclose()

            assert not http_client.is_closed
