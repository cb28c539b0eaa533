"""
Auth0 boundary: JWKS fetching, circuit breaker and token validation.
"""

from astar_backend.boundary.auth.circuit_breaker import BreakerState, CircuitBreaker
from astar_backend.boundary.auth.jwks_client import JwksClient
from astar_backend.boundary.auth.jwt_validator import JwtValidator, TokenClaims, extract_claims

__all__ = [
    "BreakerState",
    "CircuitBreaker",
    "JwksClient",
    "JwtValidator",
    "TokenClaims",
    "extract_claims",
]
