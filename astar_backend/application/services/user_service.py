"""
User service orchestrator.

Reads and edits the caller's account (email) and profile (display name,
avatar URL). Other users are only visible when they belong to the caller's
tenant.

Dependencies: astar_backend.boundary.db.CRUD.tenant_crud, astar_backend.core.users
System role: User account and profile use case orchestration
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.CRUD.tenant_crud import membership_crud, user_crud
from astar_backend.boundary.db.models.tenant_model import UserModel
from astar_backend.core.exceptions import DuplicateError, NotFoundError, ValidationError
from astar_backend.core.users import validate_avatar_url, validate_display_name, validate_email

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("display_name", "avatar_url")


def profile_to_dict(user: UserModel) -> dict:
    return {
        "user_id": user.id,
        "display_name": user.display_name,
        "avatar_url": user.avatar_url,
        "updated_at": user.updated_at,
    }


def user_to_dict(user: UserModel) -> dict:
    return {
        "id": user.id,
        "auth0_sub": user.auth0_sub,
        "email": user.email,
        "display_name": user.display_name,
        "avatar_url": user.avatar_url,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


class UserService:
    """User service orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _get_model(self, user_id: UUID) -> UserModel:
        user = await user_crud.get_by_id(self.db, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def _get_member(self, tenant_id: UUID, user_id: UUID) -> UserModel:
        """Load a user that belongs to the tenant; others are reported as missing."""
        if await membership_crud.get_membership(self.db, tenant_id, user_id) is None:
            raise NotFoundError("User", user_id)
        return await self._get_model(user_id)

    async def get_current_user(self, user_id: UUID, tenant_id: UUID | None) -> dict:
        """
        Describe the caller.

        Args:
            user_id: Caller
            tenant_id: Tenant bound to the caller's token

        Returns:
            dict: User fields plus `current_tenant_id` and `tenant_count`
        """
        user = await self._get_model(user_id)
        return {
            **user_to_dict(user),
            "current_tenant_id": tenant_id,
            "tenant_count": await user_crud.count_tenants(self.db, user_id),
        }

    async def update_email(self, user_id: UUID, email: str) -> dict:
        """
        Change the caller's email address.

        Raises:
            ValidationError: Malformed address
            DuplicateError: Address used by another user
        """
        try:
            email = validate_email(email)
        except ValueError as e:
            raise ValidationError(str(e), field="email") from e

        user = await self._get_model(user_id)
        holder = await user_crud.get_by_email(self.db, email)
        if holder is not None and holder.id != user.id:
            raise DuplicateError(f"Email '{email}' is already in use by another user", {"email": email})

        user.email = email
        await self.db.flush()
        logger.info("User email updated", extra={"user_id": str(user_id)})
        return user_to_dict(user)

    async def get_profile(self, user_id: UUID) -> dict:
        return profile_to_dict(await self._get_model(user_id))

    async def update_profile(self, user_id: UUID, changes: dict[str, Any]) -> dict:
        """
        Apply profile changes; a field set to None is cleared.

        Args:
            user_id: Caller
            changes: Subset of `display_name` and `avatar_url`

        Raises:
            ValidationError: No field given, or a field is invalid
        """
        changes = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}
        if not changes:
            raise ValidationError("No profile fields to update")

        user = await self._get_model(user_id)
        try:
            if "display_name" in changes:
                user.display_name = validate_display_name(changes["display_name"])
            if "avatar_url" in changes:
                user.avatar_url = validate_avatar_url(changes["avatar_url"])
        except ValueError as e:
            raise ValidationError(str(e)) from e

        await self.db.flush()
        logger.info(
            "User profile updated",
            extra={"user_id": str(user_id), "fields": sorted(changes)},
        )
        return profile_to_dict(user)

    async def get_user(self, tenant_id: UUID, user_id: UUID) -> dict:
        user = await self._get_member(tenant_id, user_id)
        return {**user_to_dict(user), "tenant_count": await user_crud.count_tenants(self.db, user_id)}

    async def get_user_profile(self, tenant_id: UUID, user_id: UUID) -> dict:
        return profile_to_dict(await self._get_member(tenant_id, user_id))
