"""JWT authentication against a JWK set."""

import time
from typing import Any, Dict, Iterable, Optional

import httpx
from jose import JWTError, jwt
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from ..exceptions import AuthenticationError
from ..utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_ALGORITHMS = ("RS256",)


class JWKSProvider:
    """Fetches the signing keys from a JWK endpoint and caches them."""

    def __init__(
        self,
        url: str,
        ttl: float = 300.0,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.url = url
        self.ttl = ttl
        self._client = http_client
        self._owns_client = http_client is None
        self._timeout = timeout
        self._keys: Optional[Dict[str, Any]] = None
        self._fetched_at = 0.0

    def _expired(self) -> bool:
        return self._keys is None or time.monotonic() - self._fetched_at >= self.ttl

    async def get_keys(self) -> Dict[str, Any]:
        """Return the JWK set, refreshing it once the cache expired."""
        if not self._expired():
            return self._keys

        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)

        logger.info(f"Fetching JWK set from {self.url}")
        response = await self._client.get(self.url)
        response.raise_for_status()
        keys = response.json()
        if not isinstance(keys, dict) or not isinstance(keys.get("keys"), list):
            raise ValueError(f"Response from {self.url} is not a JWK set")

        self._keys = keys
        self._fetched_at = time.monotonic()
        return keys

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


def bearer_token(authorization: Optional[str]) -> str:
    """Extract the token from an ``Authorization: Bearer`` header."""
    if not authorization:
        raise AuthenticationError("Missing bearer token")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Authorization header must use the Bearer scheme")
    return token.strip()


class JWTAuthMiddleware(BaseHTTPMiddleware):
    """Rejects requests lacking a valid bearer token.

    Requests to ``excluded_paths`` pass through untouched. Validated claims
    are exposed as ``request.state.claims``.
    """

    def __init__(
        self,
        app,
        key_provider: JWKSProvider,
        excluded_paths: Iterable[str] = (),
        algorithms: Iterable[str] = DEFAULT_ALGORITHMS,
    ):
        super().__init__(app)
        self.key_provider = key_provider
        self.excluded_paths = frozenset(excluded_paths)
        self.algorithms = list(algorithms)

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.excluded_paths:
            return await call_next(request)

        try:
            token = bearer_token(request.headers.get("Authorization"))
            request.state.claims = await self.validate(token)
        except AuthenticationError as e:
            logger.warning(f"Rejected {request.method} {request.url.path}: {e}")
            return JSONResponse(
                status_code=401,
                content={"detail": e.message},
                headers={"WWW-Authenticate": "Bearer"},
            )

        return await call_next(request)

    async def validate(self, token: str) -> Dict[str, Any]:
        try:
            keys = await self.key_provider.get_keys()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Can't load signing keys: {e}")
            raise AuthenticationError("Can't load signing keys") from e

        try:
            return jwt.decode(token, keys, algorithms=self.algorithms, options={"verify_aud": False})
        except JWTError as e:
            raise AuthenticationError(f"Invalid token: {e}") from e
