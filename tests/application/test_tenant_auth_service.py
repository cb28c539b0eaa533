"""
Test suite for tenant membership management and principal resolution.

Uses the in-memory SQLite session from conftest.

System role: Verification of multi-tenant identity flows
"""

import uuid

import pytest

from astar_backend.application.services.auth_service import AuthService
from astar_backend.application.services.role_service import RoleService, UserRoleService
from astar_backend.application.services.tenant_service import TenantService
from astar_backend.boundary.auth.jwt_validator import TokenClaims
from astar_backend.boundary.db.CRUD.tenant_crud import user_crud
from astar_backend.core.exceptions import (
    AuthenticationError,
    ConflictError,
    DuplicateError,
    NotFoundError,
    PermissionDeniedError,
)


class TestTenantService:
    """Test suite for TenantService."""

    @pytest.mark.asyncio
    async def test_duplicate_slug_is_rejected(self, test_async_db, tenant) -> None:
        with pytest.raises(DuplicateError):
            await TenantService(test_async_db).create_tenant("acme-law", "Another")

    @pytest.mark.asyncio
    async def test_invalid_slug_is_rejected(self, test_async_db) -> None:
        with pytest.raises(ValueError):
            await TenantService(test_async_db).create_tenant("Acme Law", "Acme")

    @pytest.mark.asyncio
    async def test_members_lifecycle(self, test_async_db, tenant, member) -> None:
        service = TenantService(test_async_db)

        members = await service.list_members(tenant["id"])
        assert [m["email"] for m in members] == ["alice@example.com"]

        with pytest.raises(ConflictError):
            await service.add_member(tenant["id"], member.id)

        await service.remove_member(tenant["id"], member.id)
        assert await service.list_members(tenant["id"]) == []

        added = await service.add_member(tenant["id"], member.id)
        assert added["is_active"] is True

    @pytest.mark.asyncio
    async def test_add_unknown_user(self, test_async_db, tenant) -> None:
        with pytest.raises(NotFoundError):
            await TenantService(test_async_db).add_member(tenant["id"], uuid.uuid4())

    @pytest.mark.asyncio
    async def test_rename(self, test_async_db, tenant) -> None:
        renamed = await TenantService(test_async_db).update_name(tenant["id"], "  Acme Partners ")

        assert renamed["name"] == "Acme Partners"


class TestAuthService:
    """Test suite for AuthService.resolve_principal."""

    @pytest.mark.asyncio
    async def test_token_without_org_gives_setup_principal(self, test_async_db) -> None:
        principal = await AuthService(test_async_db).resolve_principal(
            TokenClaims(sub="auth0|new", email="new@example.com")
        )

        assert principal.setup_mode is True
        assert "ROLE_SETUP_MODE" in principal.authorities
        assert principal.tenant_id is None

    @pytest.mark.asyncio
    async def test_member_gets_role_permissions(self, test_async_db, tenant, member) -> None:
        # Arrange
        role = await RoleService(test_async_db).create_role(
            tenant["id"], "editor", permissions=["table.edit.all", "record.view.own"]
        )
        await UserRoleService(test_async_db).assign_role(tenant["id"], member.id, role["id"])

        # Act
        principal = await AuthService(test_async_db).resolve_principal(
            TokenClaims(sub="auth0|alice", org_id="org_acme")
        )

        # Assert
        assert principal.tenant_id == tenant["id"]
        assert principal.user_id == member.id
        assert principal.roles == ["editor"]
        assert principal.can("table.edit.all")
        assert not principal.can("record.view.all")
        assert principal.email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_unknown_org_is_rejected(self, test_async_db, member) -> None:
        with pytest.raises(AuthenticationError):
            await AuthService(test_async_db).resolve_principal(TokenClaims(sub="auth0|alice", org_id="org_x"))

    @pytest.mark.asyncio
    async def test_inactive_tenant_is_rejected(self, test_async_db, tenant, member) -> None:
        await TenantService(test_async_db).set_active(tenant["id"], False)

        with pytest.raises(AuthenticationError, match="not active"):
            await AuthService(test_async_db).resolve_principal(
                TokenClaims(sub="auth0|alice", org_id="org_acme")
            )

    @pytest.mark.asyncio
    async def test_unknown_user_is_rejected(self, test_async_db, tenant) -> None:
        with pytest.raises(AuthenticationError, match="not registered"):
            await AuthService(test_async_db).resolve_principal(
                TokenClaims(sub="auth0|ghost", org_id="org_acme")
            )

    @pytest.mark.asyncio
    async def test_non_member_is_denied(self, test_async_db, tenant) -> None:
        await user_crud.create(test_async_db, auth0_sub="auth0|bob", email="bob@example.com")

        with pytest.raises(PermissionDeniedError):
            await AuthService(test_async_db).resolve_principal(TokenClaims(sub="auth0|bob", org_id="org_acme"))

    @pytest.mark.asyncio
    async def test_list_my_tenants(self, test_async_db, tenant, member) -> None:
        service = AuthService(test_async_db)

        tenants = await service.list_my_tenants("auth0|alice")

        assert [t["slug"] for t in tenants] == ["acme-law"]
        assert await service.list_my_tenants("auth0|nobody") == []
