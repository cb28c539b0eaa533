"""
Auth0 JWKS client.

Fetches the JSON Web Key Set of the Auth0 tenant, keeps it in memory for
`cache_ttl` seconds, retries transient HTTP failures and guards the
endpoint with a circuit breaker. A previously fetched key set keeps being
served while the endpoint is failing.

Dependencies: httpx, tenacity
System role: Signing key source for JWT validation
"""

import logging
import time
from typing import Any, Callable

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from astar_backend.boundary.auth.circuit_breaker import CircuitBreaker
from astar_backend.core.exceptions import AuthenticationError, ExternalServiceError

logger = logging.getLogger(__name__)


class JwksClient:
    """Cached, retrying JWKS fetcher."""

    def __init__(
        self,
        jwks_url: str,
        cache_ttl: int = 3600,
        timeout: float = 5.0,
        retry_attempts: int = 3,
        breaker: CircuitBreaker | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the client.

        Args:
            jwks_url: `https://<domain>/.well-known/jwks.json`
            cache_ttl: Seconds a fetched key set stays fresh
            timeout: HTTP timeout in seconds
            retry_attempts: Attempts per fetch
            breaker: Circuit breaker guarding the endpoint
            http_client: Shared httpx client (created per fetch when None)
            clock: Monotonic time source
        """
        self._jwks_url = jwks_url
        self._cache_ttl = cache_ttl
        self._timeout = timeout
        self._breaker = breaker or CircuitBreaker()
        self._http_client = http_client
        self._clock = clock
        self._jwks: dict[str, Any] | None = None
        self._fetched_at = 0.0

        self._fetch_with_retry = retry(
            retry=retry_if_exception_type(httpx.TransportError),
            stop=stop_after_attempt(retry_attempts),
            wait=wait_exponential_jitter(initial=0.2, max=2, jitter=0.2),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:fetch - Retry {retry_state.attempt_number}/{retry_attempts} after transport error"
            ),
            reraise=True,
        )(self._fetch)

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    async def _fetch(self) -> dict[str, Any]:
        if self._http_client is not None:
            response = await self._http_client.get(self._jwks_url, timeout=self._timeout)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(self._jwks_url)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict) or not isinstance(data.get("keys"), list):
            raise ValueError("JWKS response has no 'keys' list")
        return data

    def _is_fresh(self) -> bool:
        return self._jwks is not None and self._clock() - self._fetched_at < self._cache_ttl

    async def get_jwks(self, force_refresh: bool = False) -> dict[str, Any]:
        """
        Return the key set, fetching it when the cache is stale.

        Args:
            force_refresh: Ignore the cache (key rotation)

        Returns:
            dict: JWKS document with a `keys` list

        Raises:
            ExternalServiceError: When nothing is cached and the endpoint is
                unavailable or the breaker is open
        """
        if not force_refresh and self._is_fresh():
            return self._jwks

        if self._breaker.is_open():
            if self._jwks is not None:
                logger.warning(f"{__name__}:get_jwks - Circuit open, serving cached key set")
                return self._jwks
            raise ExternalServiceError(
                "Identity provider key endpoint is unavailable",
                {"reason": "circuit_open"},
            )

        try:
            jwks = await self._fetch_with_retry()
        except (httpx.HTTPError, ValueError) as e:
            self._breaker.record_failure()
            logger.error(
                f"{__name__}:get_jwks - {type(e).__name__}: {e}",
                extra={"url": self._jwks_url, "failures": self._breaker.failure_count},
            )
            if self._jwks is not None:
                return self._jwks
            raise ExternalServiceError(
                "Identity provider key endpoint is unavailable",
                {"reason": type(e).__name__},
            ) from e

        self._breaker.record_success()
        self._jwks = jwks
        self._fetched_at = self._clock()
        logger.info(f"{__name__}:get_jwks - Key set refreshed", extra={"keys": len(jwks["keys"])})
        return jwks

    @staticmethod
    def _find_key(jwks: dict[str, Any], kid: str) -> dict[str, Any] | None:
        for key in jwks.get("keys", []):
            if key.get("kid") == kid:
                return key
        return None

    async def get_signing_key(self, kid: str) -> dict[str, Any]:
        """
        Return the JWK with the given key id.

        Refreshes the key set once when the kid is unknown.

        Raises:
            AuthenticationError: If no key matches
        """
        key = self._find_key(await self.get_jwks(), kid)
        if key is None:
            key = self._find_key(await self.get_jwks(force_refresh=True), kid)
        if key is None:
            raise AuthenticationError("Unable to find appropriate signing key", {"kid": kid})
        return key
