"""
Bearer token validation.

Verifies Auth0-issued JWTs against the JWKS signing keys with python-jose
and extracts the claims the backend cares about.

Dependencies: python-jose, astar_backend.boundary.auth.jwks_client
System role: Authentication boundary
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from jose import JWTError, jwt

from astar_backend.boundary.auth.jwks_client import JwksClient
from astar_backend.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenClaims:
    """Identity facts taken from a validated token."""

    sub: str
    email: str | None = None
    org_id: str | None = None
    roles: list[str] = field(default_factory=list)


class JwtValidator:
    """Validates RS256 bearer tokens issued by Auth0."""

    def __init__(
        self,
        jwks_client: JwksClient,
        audience: str,
        issuer: str,
        algorithms: list[str] | None = None,
    ) -> None:
        self._jwks_client = jwks_client
        self._audience = audience
        self._issuer = issuer
        self._algorithms = algorithms or ["RS256"]

    async def validate(self, token: str) -> dict[str, Any]:
        """
        Verify a token and return its claims.

        Args:
            token: Raw bearer token

        Returns:
            dict: Verified claims

        Raises:
            AuthenticationError: On any validation failure
            ExternalServiceError: When signing keys cannot be fetched
        """
        if not token:
            raise AuthenticationError("Bearer token is missing")
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise AuthenticationError("Malformed token header") from e

        kid = header.get("kid")
        if not kid:
            raise AuthenticationError("Token header has no key id")

        key = await self._jwks_client.get_signing_key(kid)
        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=self._algorithms,
                audience=self._audience,
                issuer=self._issuer,
            )
        except JWTError as e:
            logger.info(
                f"{__name__}:validate - Token rejected",
                extra={"reason": type(e).__name__, "kid": kid},
            )
            raise AuthenticationError(f"Invalid token: {e}") from e

        if not claims.get("sub"):
            raise AuthenticationError("Token has no subject")
        return claims


def extract_claims(
    claims: dict[str, Any],
    org_id_claim: str = "org_id",
    namespace: str | None = None,
) -> TokenClaims:
    """
    Map raw claims to TokenClaims.

    Email falls back to the namespaced custom claim; roles are read from the
    namespaced `roles` claim when present.
    """
    namespace = namespace or ""
    email = claims.get("email") or claims.get(f"{namespace}email")
    roles = claims.get(f"{namespace}roles") if namespace else None
    if roles is None:
        roles = claims.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    return TokenClaims(
        sub=claims["sub"],
        email=email,
        org_id=claims.get(org_id_claim),
        roles=list(roles),
    )
