"""
Auth0 configuration settings.

JWT validation parameters, JWKS caching and circuit breaker tuning.

Dependencies: pydantic_settings
System role: Identity provider configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    """Settings for Auth0 bearer token validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AUTH0_",
        case_sensitive=False,
        extra="ignore",
    )

    domain: str = Field(default="astar-dev.jp.auth0.com", description="Auth0 tenant domain")
    audience: str = Field(default="https://api.astar.local", description="Expected token audience")
    issuer: str | None = Field(
        default=None,
        description="Expected issuer, defaults to https://<domain>/",
    )
    algorithms: list[str] = Field(default_factory=lambda: ["RS256"])

    jwks_cache_ttl: int = Field(default=3600, description="JWKS cache lifetime in seconds")
    jwks_timeout: float = Field(default=5.0, description="JWKS HTTP timeout in seconds")
    jwks_retry_attempts: int = Field(default=3, description="JWKS fetch attempts")

    breaker_failure_threshold: int = Field(default=5, description="Failures before the breaker opens")
    breaker_recovery_seconds: int = Field(default=60, description="Open state duration")

    org_id_claim: str = Field(default="org_id", description="Claim carrying the Auth0 organization")
    custom_claim_namespace: str = Field(
        default="https://astar.local/",
        description="Namespace prefix for custom claims (email, roles)",
    )

    @property
    def jwks_url(self) -> str:
        return f"https://{self.domain}/.well-known/jwks.json"

    @property
    def expected_issuer(self) -> str:
        return self.issuer or f"https://{self.domain}/"
