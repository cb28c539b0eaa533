"""
Roles router package.

Exports the role management router and the user-role assignment router.
"""

from .roles_router import router
from .user_roles_router import router as user_roles_router

__all__ = ["router", "user_roles_router"]
