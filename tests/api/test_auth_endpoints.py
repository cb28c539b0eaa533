"""
Test suite for the authentication chain and identity endpoints.

System role: Verification of bearer token handling and tenant membership checks
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

from astar_backend.api.deps.dependencies import get_auth_service
from astar_backend.core.exceptions import AuthenticationError, ExternalServiceError
from astar_backend.core.principal import AuthenticatedUser


def _cache_with_validator(validate: AsyncMock) -> MagicMock:
    cache = MagicMock()
    cache.jwt_validator.validate = validate
    return cache


class TestBearerToken:
    """Token resolution through get_current_principal."""

    def test_missing_token_is_401(self, client):
        response = client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["detail"]["code"] == "UNAUTHORIZED"

    def test_invalid_token_is_401(self, client):
        validate = AsyncMock(side_effect=AuthenticationError("Invalid token"))

        with patch(
            "astar_backend.api.deps.dependencies.get_service_cache",
            return_value=_cache_with_validator(validate),
        ):
            response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        validate.assert_awaited_once_with("garbage")

    def test_unreachable_jwks_is_503(self, client):
        validate = AsyncMock(side_effect=ExternalServiceError("JWKS endpoint unavailable"))

        with patch(
            "astar_backend.api.deps.dependencies.get_service_cache",
            return_value=_cache_with_validator(validate),
        ):
            response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer token"})

        assert response.status_code == 503


class TestIdentityEndpoints:
    """GET /auth/me and GET /auth/tenants."""

    def test_me_returns_member_identity(self, client, login, viewer_principal):
        login(viewer_principal)

        response = client.get("/api/v1/auth/me")

        assert response.status_code == 200
        data = response.json()
        assert data["tenant_id"] == str(viewer_principal.tenant_id)
        assert data["permissions"] == ["record.view.all", "table.view.all"]
        assert "ROLE_VIEWER" in data["authorities"]
        assert data["setup_mode"] is False

    def test_setup_principal_lists_tenants(self, client, login, override_service):
        login(AuthenticatedUser.setup("auth0|new", email="new@example.com"))
        now = datetime.now(timezone.utc).isoformat()
        auth_service = override_service(get_auth_service)
        auth_service.list_my_tenants.return_value = [
            {
                "id": str(uuid.uuid4()),
                "slug": "acme-law",
                "name": "Acme Law",
                "auth0_org_id": "org_acme",
                "is_active": True,
                "created_at": now,
                "updated_at": now,
            }
        ]

        response = client.get("/api/v1/auth/tenants")

        assert response.status_code == 200
        assert [t["slug"] for t in response.json()] == ["acme-law"]
        auth_service.list_my_tenants.assert_awaited_once_with("auth0|new")

    def test_setup_principal_cannot_use_tenant_endpoints(self, client, login):
        login(AuthenticatedUser.setup("auth0|new"))

        response = client.get("/api/v1/tags")

        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "TENANT_CONTEXT_REQUIRED"
