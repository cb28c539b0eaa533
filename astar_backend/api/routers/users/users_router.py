"""
User account and profile endpoints.

Routes:
- GET /users/me - Caller's account with tenant information
- PUT /users/me - Change caller's email
- GET /users/me/profile - Caller's profile
- PUT /users/me/profile - Change display name or avatar
- GET /users/{user_id} - Member of the caller's tenant
- GET /users/{user_id}/profile - Profile of a member

Dependencies: astar_backend.application.services.user_service
System role: User profile HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from astar_backend.api.deps.dependencies import get_current_user, get_user_service
from astar_backend.api.error_handling import handle_domain_errors
from astar_backend.application.services.user_service import UserService
from astar_backend.core.exceptions import PermissionDeniedError
from astar_backend.core.principal import AuthenticatedUser
from astar_backend.models.user import (
    CurrentUserResponse,
    UpdateProfileRequest,
    UpdateUserRequest,
    UserDetailResponse,
    UserProfileResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

VIEW_USERS = "user.view.all"


def _require_self_or_viewer(user: AuthenticatedUser, user_id: UUID) -> None:
    if user.user_id != user_id and not user.can(VIEW_USERS):
        raise PermissionDeniedError(f"Missing permission: {VIEW_USERS}", {"permission": VIEW_USERS})


@router.get("/me", response_model=CurrentUserResponse)
@handle_domain_errors
async def get_me(
    user: AuthenticatedUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> CurrentUserResponse:
    return CurrentUserResponse(**await user_service.get_current_user(user.user_id, user.tenant_id))


@router.put("/me", response_model=UserResponse)
@handle_domain_errors
async def update_me(
    request: UpdateUserRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    """
    Change the caller's email.

    Raises:
        HTTPException(400): Malformed address
        HTTPException(409): Address used by another user
    """
    return UserResponse(**await user_service.update_email(user.user_id, request.email))


@router.get("/me/profile", response_model=UserProfileResponse)
@handle_domain_errors
async def get_my_profile(
    user: AuthenticatedUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> UserProfileResponse:
    return UserProfileResponse(**await user_service.get_profile(user.user_id))


@router.put("/me/profile", response_model=UserProfileResponse)
@handle_domain_errors
async def update_my_profile(
    request: UpdateProfileRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> UserProfileResponse:
    """Change the fields present in the body; null clears a field."""
    changes = request.model_dump(include=request.model_fields_set)
    profile = await user_service.update_profile(user.user_id, changes)
    return UserProfileResponse(**profile)


@router.get("/{user_id}", response_model=UserDetailResponse)
@handle_domain_errors
async def get_user(
    user_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> UserDetailResponse:
    _require_self_or_viewer(user, user_id)
    return UserDetailResponse(**await user_service.get_user(user.tenant_id, user_id))


@router.get("/{user_id}/profile", response_model=UserProfileResponse)
@handle_domain_errors
async def get_user_profile(
    user_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> UserProfileResponse:
    _require_self_or_viewer(user, user_id)
    return UserProfileResponse(**await user_service.get_user_profile(user.tenant_id, user_id))
