"""
Test suite for user accounts and profiles.

System role: Verification of profile editing and tenant-scoped user lookup
"""

import uuid

import pytest

from astar_backend.application.services.tenant_service import TenantService
from astar_backend.application.services.user_service import UserService
from astar_backend.boundary.db.CRUD.tenant_crud import user_crud
from astar_backend.core.exceptions import DuplicateError, NotFoundError, ValidationError
from astar_backend.core.users import validate_avatar_url, validate_display_name, validate_email


class TestUserRules:
    """Test suite for profile field validation."""

    def test_email_is_normalized(self) -> None:
        assert validate_email("  Alice@Example.COM ") == "alice@example.com"

    @pytest.mark.parametrize("email", ["", "alice", "alice@", "a b@example.com"])
    def test_bad_email_is_rejected(self, email: str) -> None:
        with pytest.raises(ValueError):
            validate_email(email)

    def test_display_name_rules(self) -> None:
        assert validate_display_name(None) is None
        assert validate_display_name("x" * 255) == "x" * 255
        with pytest.raises(ValueError, match="cannot be blank if provided"):
            validate_display_name("   ")
        with pytest.raises(ValueError, match="cannot exceed 255 characters"):
            validate_display_name("x" * 256)

    def test_avatar_url_rules(self) -> None:
        assert validate_avatar_url("https://cdn.example.com/a.png") == "https://cdn.example.com/a.png"
        with pytest.raises(ValueError, match="cannot be blank if provided"):
            validate_avatar_url(" ")
        with pytest.raises(ValueError):
            validate_avatar_url("ftp://example.com/a.png")


class TestUserService:
    """Test suite for UserService."""

    @pytest.mark.asyncio
    async def test_current_user_counts_tenants(self, test_async_db, tenant, member) -> None:
        current = await UserService(test_async_db).get_current_user(member.id, tenant["id"])

        assert current["email"] == "alice@example.com"
        assert current["current_tenant_id"] == tenant["id"]
        assert current["tenant_count"] == 1

    @pytest.mark.asyncio
    async def test_update_email(self, test_async_db, member) -> None:
        await user_crud.create(test_async_db, auth0_sub="auth0|bob", email="bob@example.com")
        service = UserService(test_async_db)

        updated = await service.update_email(member.id, "Alice.Smith@Example.com")

        assert updated["email"] == "alice.smith@example.com"
        with pytest.raises(DuplicateError):
            await service.update_email(member.id, "BOB@example.com")
        with pytest.raises(ValidationError):
            await service.update_email(member.id, "not-an-email")

    @pytest.mark.asyncio
    async def test_update_profile_changes_only_given_fields(self, test_async_db, member) -> None:
        service = UserService(test_async_db)

        # Act
        profile = await service.update_profile(member.id, {"avatar_url": "https://cdn.example.com/alice.png"})
        cleared = await service.update_profile(member.id, {"display_name": None})

        # Assert
        assert profile["display_name"] == "Alice"
        assert profile["avatar_url"] == "https://cdn.example.com/alice.png"
        assert cleared["display_name"] is None
        assert cleared["avatar_url"] == "https://cdn.example.com/alice.png"

    @pytest.mark.asyncio
    async def test_update_profile_rejects_empty_and_blank(self, test_async_db, member) -> None:
        service = UserService(test_async_db)

        with pytest.raises(ValidationError, match="No profile fields to update"):
            await service.update_profile(member.id, {})
        with pytest.raises(ValidationError):
            await service.update_profile(member.id, {"display_name": "  "})

    @pytest.mark.asyncio
    async def test_other_users_are_visible_only_within_tenant(self, test_async_db, tenant, member) -> None:
        outsider = await user_crud.create(test_async_db, auth0_sub="auth0|eve", email="eve@example.com")
        service = UserService(test_async_db)

        detail = await service.get_user(tenant["id"], member.id)
        profile = await service.get_user_profile(tenant["id"], member.id)

        assert detail["tenant_count"] == 1
        assert profile["display_name"] == "Alice"
        with pytest.raises(NotFoundError):
            await service.get_user(tenant["id"], outsider.id)

        await TenantService(test_async_db).add_member(tenant["id"], outsider.id)
        assert (await service.get_user(tenant["id"], outsider.id))["email"] == "eve@example.com"

    @pytest.mark.asyncio
    async def test_unknown_user(self, test_async_db) -> None:
        with pytest.raises(NotFoundError):
            await UserService(test_async_db).get_profile(uuid.uuid4())
